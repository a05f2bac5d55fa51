from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mincoins.logging_setup import ALLOWED_LOG_LEVELS, DEFAULT_LOG_LEVEL_NAME

AUSTRALIAN_DENOMINATIONS: tuple[int, ...] = (1, 2, 5, 10, 20, 50, 100, 200)
DEFAULT_CURRENCY = "aud"
DEFAULT_MAX_TABLE_SIZE = 50_000_000


@dataclass(frozen=True, slots=True)
class SearchOptions:
    seed: bool = True
    word_limit_bits: int = 64
    max_table_size: int | None = DEFAULT_MAX_TABLE_SIZE
    timeout_seconds: float | None = None

    @property
    def word_limit(self) -> int:
        return 2**self.word_limit_bits - 1


@dataclass(slots=True)
class ProgramConfig:
    app_log_level: str
    home_dir: str
    search: SearchOptions
    default_currency: str
    currencies: dict[str, tuple[int, ...]] = field(default_factory=dict)
    app_log_level_was_missing: bool = False

    def denominations_for(self, currency: str | None = None) -> tuple[int, ...]:
        name = (currency or self.default_currency).strip().lower()
        if name not in self.currencies:
            known = ", ".join(sorted(self.currencies)) or "<none>"
            raise ValueError(f"unknown currency {name!r}; configured: {known}")
        return self.currencies[name]


def default_program_config() -> ProgramConfig:
    return ProgramConfig(
        app_log_level=DEFAULT_LOG_LEVEL_NAME,
        home_dir="~/.mincoins",
        search=SearchOptions(),
        default_currency=DEFAULT_CURRENCY,
        currencies={DEFAULT_CURRENCY: AUSTRALIAN_DENOMINATIONS},
    )


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a mapping")
    return value


def parse_denominations(raw: Any, *, name: str) -> tuple[int, ...]:
    if not isinstance(raw, list) or not raw:
        raise ValueError(f"currency {name}: denominations must be a non-empty list")
    values: list[int] = []
    for item in raw:
        if isinstance(item, bool):
            raise ValueError(f"currency {name}: denomination {item!r} is not an integer")
        try:
            value = int(item)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"currency {name}: denomination {item!r} is not an integer") from exc
        if value <= 0:
            raise ValueError(f"currency {name}: denominations must be positive")
        values.append(value)
    return tuple(sorted(set(values)))


def _parse_search_options(search: dict[str, Any]) -> SearchOptions:
    try:
        bits = int(search.get("word_limit_bits", 64))
    except (TypeError, ValueError) as exc:
        raise ValueError("search.word_limit_bits must be an integer") from exc
    if bits < 8:
        raise ValueError("search.word_limit_bits must be >= 8")

    max_table_raw = search.get("max_table_size")
    max_table_size: int | None = DEFAULT_MAX_TABLE_SIZE
    if max_table_raw is not None:
        try:
            max_table_size = int(max_table_raw)
        except (TypeError, ValueError) as exc:
            raise ValueError("search.max_table_size must be an integer") from exc
        if max_table_size <= 0:
            max_table_size = None

    timeout_raw = search.get("timeout_seconds")
    timeout_seconds: float | None = None
    if timeout_raw is not None:
        try:
            timeout_seconds = float(timeout_raw)
        except (TypeError, ValueError) as exc:
            raise ValueError("search.timeout_seconds must be numeric") from exc
        if timeout_seconds <= 0:
            timeout_seconds = None

    return SearchOptions(
        seed=bool(search.get("seed", True)),
        word_limit_bits=bits,
        max_table_size=max_table_size,
        timeout_seconds=timeout_seconds,
    )


def parse_program_config(raw: dict[str, Any]) -> ProgramConfig:
    app = _section(raw, "app")
    search = _section(raw, "search")
    currencies_root = _section(raw, "currencies")

    log_level_raw = app.get("log_level")
    log_level = str(log_level_raw or "").strip().upper()
    if log_level not in ALLOWED_LOG_LEVELS:
        log_level = DEFAULT_LOG_LEVEL_NAME

    sets_raw = currencies_root.get("sets")
    if sets_raw is None:
        sets_raw = {DEFAULT_CURRENCY: list(AUSTRALIAN_DENOMINATIONS)}
    if not isinstance(sets_raw, dict):
        raise ValueError("currencies.sets must be a mapping")
    currencies: dict[str, tuple[int, ...]] = {}
    for name_raw, values in sets_raw.items():
        name = str(name_raw).strip().lower()
        if not name:
            raise ValueError("currencies.sets names must be non-empty")
        if name in currencies:
            raise ValueError(f"duplicate currency in currencies.sets: {name}")
        currencies[name] = parse_denominations(values, name=name)
    if not currencies:
        raise ValueError("currencies.sets must define at least one currency")

    default_currency = str(currencies_root.get("default", DEFAULT_CURRENCY)).strip().lower()
    if default_currency not in currencies:
        raise ValueError(f"currencies.default names an undefined set: {default_currency}")

    return ProgramConfig(
        app_log_level=log_level,
        home_dir=str(app.get("home_dir", "~/.mincoins")),
        search=_parse_search_options(search),
        default_currency=default_currency,
        currencies=currencies,
        app_log_level_was_missing=log_level_raw is None,
    )
