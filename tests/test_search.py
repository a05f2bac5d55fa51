from __future__ import annotations

import itertools
from collections import Counter

import pytest

from mincoins.core.search import (
    find_min_coins,
    lcm_within,
    leap_distance,
    normalize_denominations,
)
from mincoins.core.types import SearchStatus

AUD = (1, 2, 5, 10, 20, 50, 100, 200)


def _reference_min_count(coins: tuple[int, ...], target: int) -> int | None:
    best: list[int | None] = [None] * (target + 1)
    best[0] = 0
    for total in range(1, target + 1):
        for coin in coins:
            prev = best[total - coin] if coin <= total else None
            if prev is not None and (best[total] is None or prev + 1 < best[total]):
                best[total] = prev + 1
    return best[target]


def test_aud_65_needs_three_coins() -> None:
    result = find_min_coins(AUD, 65)
    assert result.status == SearchStatus.FOUND
    assert result.coins == (5, 10, 50)
    assert result.coin_count == 3


def test_evens_cannot_make_odd_target() -> None:
    result = find_min_coins([2, 4, 6], 5)
    assert result.status == SearchStatus.INFEASIBLE
    assert result.coins == ()
    assert result.found is False


def test_five_and_ten_cannot_make_seven() -> None:
    assert find_min_coins({5, 10}, 7).status == SearchStatus.INFEASIBLE


def test_single_unit_coin_uses_target_coins() -> None:
    result = find_min_coins([1], 100)
    assert result.coins == (1,) * 100


def test_aud_3_uses_two_and_one() -> None:
    assert find_min_coins(AUD, 3).coins == (1, 2)


def test_single_denomination_not_dividing_target_is_infeasible() -> None:
    assert find_min_coins([7], 20).status == SearchStatus.INFEASIBLE
    assert find_min_coins([7], 21).coins == (7, 7, 7)


def test_denominations_above_target_are_pruned() -> None:
    result = find_min_coins([1, 500, 2, 1000], 4)
    assert result.denominations == (1, 2)
    assert result.coins == (2, 2)


def test_all_denominations_above_target_is_infeasible() -> None:
    result = find_min_coins([50, 100], 20)
    assert result.status == SearchStatus.INFEASIBLE
    assert result.denominations == ()
    assert result.reason == "all_denominations_exceed_target"


def test_non_greedy_set_finds_true_minimum() -> None:
    assert find_min_coins([1, 7, 10], 15).coins == (1, 7, 7)
    assert find_min_coins([1, 5, 6, 8], 51).coin_count == 7
    assert find_min_coins([5, 8], 51).coin_count == 9


@pytest.mark.parametrize(
    "coins",
    [
        AUD,
        (1, 3, 4),
        (1, 7, 10),
        (3, 7),
        (4, 9),
        (5, 8),
        (2, 4, 6),
        (6, 10, 15),
        (6, 10, 15, 30),
        (12, 15, 20, 60),
    ],
)
def test_matches_reference_with_and_without_seeding(coins: tuple[int, ...]) -> None:
    for target in range(1, 301):
        expected = _reference_min_count(coins, target)
        for seed in (True, False):
            result = find_min_coins(coins, target, seed=seed)
            if expected is None:
                assert result.status == SearchStatus.INFEASIBLE, (coins, target, seed)
            else:
                assert result.coin_count == expected, (coins, target, seed)
                assert sum(result.coins) == target
                assert set(result.coins) <= set(coins)


def test_only_solution_avoids_largest_coin() -> None:
    # 133 = 3x15 + 2x20 + 4x12 is the only solution and uses no 60s.
    result = find_min_coins([12, 15, 20, 60], 133)
    assert result.status == SearchStatus.FOUND
    assert result.coins == (12, 12, 12, 12, 15, 15, 15, 20, 20)


@pytest.mark.parametrize(("target", "sixties"), [(60_073, 999), (60_133, 1000)])
def test_seeded_search_keeps_smaller_coins_the_target_needs(target: int, sixties: int) -> None:
    seeded = find_min_coins([12, 15, 20, 60], target)
    plain = find_min_coins([12, 15, 20, 60], target, seed=False)
    # Leaping to within one LCM of the target would leave 73, which no coins make.
    assert seeded.stats.seeded_until == target - 133 - 1_080
    assert seeded.stats.seeded_until > 0
    assert seeded.coin_count == plain.coin_count == sixties + 9
    assert Counter(seeded.coins) == {60: sixties, 20: 2, 15: 3, 12: 4}
    assert sum(seeded.coins) == target


@pytest.mark.parametrize("coins", [AUD, (12, 15, 20, 60)])
def test_seeding_matches_plain_search_on_large_targets(coins: tuple[int, ...]) -> None:
    for target in range(20_100, 20_100 + 37 * 20, 37):
        seeded = find_min_coins(coins, target)
        plain = find_min_coins(coins, target, seed=False)
        assert seeded.status == SearchStatus.FOUND, (coins, target)
        assert seeded.stats.seeded_until > 0, (coins, target)
        assert seeded.coin_count == plain.coin_count, (coins, target)
        assert sum(seeded.coins) == target


def test_seeding_leaps_for_large_targets() -> None:
    seeded = find_min_coins(AUD, 100_000)
    plain = find_min_coins(AUD, 100_000, seed=False)
    assert seeded.coins == (200,) * 500
    assert plain.coin_count == seeded.coin_count
    assert seeded.stats.seeded_until == 80_000
    assert seeded.stats.lcm == 200
    assert plain.stats.seeded_until == 0
    assert seeded.stats.compares < plain.stats.compares


def test_seeding_with_single_denomination() -> None:
    assert find_min_coins([5], 15).coins == (5, 5, 5)
    assert find_min_coins([5], 12).status == SearchStatus.INFEASIBLE


def test_lcm_overflow_falls_back_to_plain_search() -> None:
    result = find_min_coins([3, 7, 11], 500, word_limit=100)
    assert result.stats.lcm is None
    assert result.stats.seeded_until == 0
    assert result.coin_count == _reference_min_count((3, 7, 11), 500)


def test_input_order_and_duplicates_do_not_change_result() -> None:
    a = find_min_coins([200, 1, 50, 5, 2, 100, 10, 20], 388)
    b = find_min_coins([1, 1, 2, 5, 5, 10, 20, 50, 100, 200], 388)
    assert a.coins == b.coins
    assert a.coins == find_min_coins(AUD, 388).coins


def test_repeated_calls_are_deterministic() -> None:
    first = find_min_coins((1, 3, 4), 97)
    for _ in range(3):
        again = find_min_coins((1, 3, 4), 97)
        assert again.coins == first.coins
        assert again.stats == first.stats


@pytest.mark.parametrize(
    ("coins", "target"),
    [
        ([1, 2], 0),
        ([1, 2], -5),
        ([], 10),
        ([0, 1], 10),
        ([-1, 2], 10),
        ([1.5], 10),
        ([1], "10"),
        ([True], 3),
    ],
)
def test_invalid_input_raises(coins, target) -> None:
    with pytest.raises(ValueError):
        find_min_coins(coins, target)


def test_table_size_limit_reports_resource_exhausted() -> None:
    result = find_min_coins(AUD, 1_000, max_table_size=1_000)
    assert result.status == SearchStatus.RESOURCE_EXHAUSTED
    assert result.reason == "table_size_limit"


def test_unallocatable_table_reports_resource_exhausted() -> None:
    result = find_min_coins([1, 2], 2**80)
    assert result.status == SearchStatus.RESOURCE_EXHAUSTED
    assert result.reason == "allocation_failed"


def test_deadline_reports_timed_out(monkeypatch) -> None:
    ticks = itertools.count(0.0, 10.0)
    monkeypatch.setattr("mincoins.core.search.time.monotonic", lambda: next(ticks))
    result = find_min_coins(AUD, 5_000, timeout_seconds=1.0)
    assert result.status == SearchStatus.TIMED_OUT
    assert result.reason == "deadline_exceeded"


@pytest.mark.parametrize("timeout_seconds", [0, -1.0])
def test_non_positive_timeout_means_no_deadline(monkeypatch, timeout_seconds: float) -> None:
    ticks = itertools.count(0.0, 10.0)
    monkeypatch.setattr("mincoins.core.search.time.monotonic", lambda: next(ticks))
    result = find_min_coins(AUD, 65, timeout_seconds=timeout_seconds)
    assert result.status == SearchStatus.FOUND
    assert result.coins == (5, 10, 50)


def test_normalize_denominations_dedupes_sorts_and_prunes() -> None:
    assert normalize_denominations([10, 1, 5, 5, 50], 20) == (1, 5, 10)


def test_lcm_within() -> None:
    assert lcm_within([4, 6, 10]) == 60
    assert lcm_within([4, 6, 10], word_limit=59) is None


def test_leap_distance_covers_non_max_coins() -> None:
    assert leap_distance((1, 2, 5, 10, 20, 50, 100, 200), 200) == 199 * 100
    assert leap_distance((3, 7), 21) == 21
    assert leap_distance((9,), 9) == 9
