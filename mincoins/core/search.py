from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterable

from mincoins.core.types import CoinSearchResult, SearchStats, SearchStatus

WORD_LIMIT = 2**64 - 1

_search_logger = logging.getLogger("mincoins.search")


def validate_search_input(denominations: Iterable[int], target: int) -> list[int]:
    if isinstance(target, bool) or not isinstance(target, int):
        raise ValueError(f"target must be an integer, got {target!r}")
    if target < 1:
        raise ValueError(f"target must be a positive number, got {target}")
    values = list(denominations)
    if not values:
        raise ValueError("denominations must be non-empty")
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"denominations must be integers, got {value!r}")
        if value <= 0:
            raise ValueError(f"denominations must be positive, got {value}")
    return values


def normalize_denominations(denominations: Iterable[int], target: int) -> tuple[int, ...]:
    """Dedupe and sort ascending, dropping anything larger than the target."""
    return tuple(d for d in sorted(set(denominations)) if d <= target)


def lcm_within(values: Iterable[int], *, word_limit: int = WORD_LIMIT) -> int | None:
    """LCM of ``values``, or None once any partial result exceeds ``word_limit``."""
    result = 1
    for value in values:
        result = math.lcm(result, value)
        if result > word_limit:
            return None
    return result


def leap_distance(denominations: tuple[int, ...], lcm: int) -> int:
    """Gap kept between the highest seeded sum and the target.

    An optimal solution never holds ``m`` or more coins below the largest
    denomination ``m``: some non-empty subset of them would sum to a multiple
    of ``m`` and could be swapped for fewer ``m`` coins. Their total is
    therefore at most ``(m - 1) * second_largest``.
    """
    if len(denominations) < 2:
        return lcm
    largest, second = denominations[-1], denominations[-2]
    return max(lcm, (largest - 1) * second)


def _seed_frontier(
    totals: list[int | None],
    denominations: tuple[int, ...],
    target: int,
    stats: SearchStats,
    word_limit: int,
) -> int:
    largest = denominations[-1]
    lcm = lcm_within(denominations, word_limit=word_limit)
    stats.lcm = lcm
    if lcm is None:
        _search_logger.debug("lcm exceeds word limit; searching without seeding")
        return 0
    leap = leap_distance(denominations, lcm)
    if leap > word_limit:
        _search_logger.debug("leap distance exceeds word limit; searching without seeding")
        return 0
    start = 0
    rt = largest
    while rt + leap <= target:
        stats.compares += 1
        totals[rt] = largest
        start = rt
        rt += largest
    stats.compares += 1
    stats.seeded_until = start
    stats.reached += start // largest
    if start:
        _search_logger.debug("seeded multiples of %s up to %s (leap=%s)", largest, start, leap)
    return start


def _reconstruct(totals: list[int | None], target: int) -> tuple[int, ...]:
    coins: list[int] = []
    total = target
    while total > 0:
        coin: int = totals[total]  # type: ignore[assignment]
        coins.append(coin)
        total -= coin
    coins.sort()
    return tuple(coins)


def find_min_coins(
    denominations: Iterable[int],
    target: int,
    *,
    seed: bool = True,
    word_limit: int = WORD_LIMIT,
    max_table_size: int | None = None,
    timeout_seconds: float | None = None,
) -> CoinSearchResult:
    """Find the fewest coins from ``denominations`` that sum exactly to ``target``.

    Breadth-first search over the sums ``0..target``: every sum is first reached
    along a minimum-coin path, so the first time ``target`` is marked the answer
    is optimal. Infeasible, out-of-memory and deadline outcomes are reported
    through ``CoinSearchResult.status``; invalid input raises ``ValueError``.
    """
    values = validate_search_input(denominations, target)
    stats = SearchStats()
    coins = normalize_denominations(values, target)
    if len(coins) < len(set(values)):
        _search_logger.debug("pruned denominations above target=%s: kept %s", target, coins)
    if not coins:
        return CoinSearchResult(
            status=SearchStatus.INFEASIBLE,
            target=target,
            denominations=coins,
            stats=stats,
            reason="all_denominations_exceed_target",
        )

    table_size = target + 1
    if max_table_size is not None and table_size > max_table_size:
        _search_logger.warning(
            "target=%s needs %s table slots; limit is %s", target, table_size, max_table_size
        )
        return CoinSearchResult(
            status=SearchStatus.RESOURCE_EXHAUSTED,
            target=target,
            denominations=coins,
            stats=stats,
            reason="table_size_limit",
        )
    try:
        totals: list[int | None] = [None] * table_size
        queue = [0] * table_size
    except (MemoryError, OverflowError):
        _search_logger.error("out of memory allocating search tables for target=%s", target)
        return CoinSearchResult(
            status=SearchStatus.RESOURCE_EXHAUSTED,
            target=target,
            denominations=coins,
            stats=stats,
            reason="allocation_failed",
        )

    if seed:
        queue[0] = _seed_frontier(totals, coins, target, stats, word_limit)

    deadline = None
    if timeout_seconds is not None and timeout_seconds > 0:
        deadline = time.monotonic() + timeout_seconds
    queue_pos = 0
    queue_max = 1
    reached_target = False
    while queue_pos < queue_max and not reached_target:
        if deadline is not None and time.monotonic() > deadline:
            _search_logger.warning("search for target=%s timed out", target)
            return CoinSearchResult(
                status=SearchStatus.TIMED_OUT,
                target=target,
                denominations=coins,
                stats=stats,
                reason="deadline_exceeded",
            )
        current = queue[queue_pos]
        queue_pos += 1
        stats.expanded += 1
        for coin in coins:
            stats.compares += 1
            total = current + coin
            if total > target:
                break
            if totals[total] is None:
                totals[total] = coin
                queue[queue_max] = total
                queue_max += 1
                stats.reached += 1
            if total == target:
                reached_target = True
                break

    if totals[target] is None:
        _search_logger.debug("target=%s unreachable with %s", target, coins)
        return CoinSearchResult(
            status=SearchStatus.INFEASIBLE,
            target=target,
            denominations=coins,
            stats=stats,
            reason="no_combination",
        )

    result = CoinSearchResult(
        status=SearchStatus.FOUND,
        target=target,
        coins=_reconstruct(totals, target),
        denominations=coins,
        stats=stats,
    )
    _search_logger.debug(
        "target=%s solved with %s coins compares=%s expanded=%s",
        target,
        result.coin_count,
        stats.compares,
        stats.expanded,
    )
    return result
