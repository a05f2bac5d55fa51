from __future__ import annotations

from collections import Counter
from typing import Any

from mincoins.core.types import CoinSearchResult, SearchStatus


def summarize_coins(coins: tuple[int, ...] | list[int]) -> list[tuple[int, int]]:
    """Return ``(denomination, count)`` pairs, largest denomination first."""
    counts = Counter(coins)
    return sorted(counts.items(), key=lambda item: -item[0])


def format_coin_summary(result: CoinSearchResult) -> str:
    """Render ``result`` as ``"1x5 + 1x10 + 1x50 = 65"``, smallest coin first."""
    if not result.found:
        raise ValueError(f"cannot format coins for a {result.status} result")
    groups = reversed(summarize_coins(result.coins))
    terms = " + ".join(f"{count}x{coin}" for coin, count in groups)
    return f"{terms} = {result.target}"


def describe_result(result: CoinSearchResult, *, show_stats: bool = False) -> str:
    lines: list[str] = []
    if show_stats:
        lines.extend(["", f"Solution took {result.stats.compares} compares"])
    if result.status == SearchStatus.FOUND:
        lines.extend(
            [
                "",
                f"{result.coin_count} coins needed to make the target of {result.target}",
                "",
                format_coin_summary(result),
            ]
        )
    elif result.status == SearchStatus.INFEASIBLE:
        lines.extend(["", f"No possible set of coins makes the target of {result.target}"])
    elif result.status == SearchStatus.RESOURCE_EXHAUSTED:
        lines.extend(["", f"Out of memory searching for the target of {result.target}"])
    else:
        lines.extend(["", f"Search for the target of {result.target} timed out"])
    return "\n".join(lines)


def result_to_dict(result: CoinSearchResult) -> dict[str, Any]:
    return {
        "status": str(result.status),
        "target": result.target,
        "coin_count": result.coin_count,
        "coins": [
            {"denomination": coin, "count": count} for coin, count in summarize_coins(result.coins)
        ],
        "denominations": list(result.denominations),
        "reason": result.reason,
        "stats": {
            "compares": result.stats.compares,
            "expanded": result.stats.expanded,
            "reached": result.stats.reached,
            "seeded_until": result.stats.seeded_until,
            "lcm": result.stats.lcm,
        },
    }
