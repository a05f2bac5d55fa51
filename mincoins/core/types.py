from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class SearchStatus(StrEnum):
    FOUND = "found"
    INFEASIBLE = "infeasible"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    TIMED_OUT = "timed_out"


@dataclass(slots=True)
class SearchStats:
    compares: int = 0
    expanded: int = 0
    reached: int = 0
    seeded_until: int = 0
    lcm: int | None = None


@dataclass(frozen=True, slots=True)
class CoinSearchResult:
    status: SearchStatus
    target: int
    coins: tuple[int, ...] = ()
    denominations: tuple[int, ...] = ()
    stats: SearchStats = field(default_factory=SearchStats)
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.status == SearchStatus.FOUND

    @property
    def coin_count(self) -> int:
        return len(self.coins)
