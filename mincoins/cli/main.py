from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from concurrent_log_handler import ConcurrentRotatingFileHandler

from mincoins.config.io import load_program_config
from mincoins.config.models import ProgramConfig, default_program_config
from mincoins.core.search import find_min_coins
from mincoins.core.summary import describe_result, result_to_dict
from mincoins.logging_setup import apply_level_to_root, attach_file_logging, coerce_log_level

_CLI_SERVICE_NAME = "cli"
_cli_file_logger_initialized = False
_cli_file_log_handler: ConcurrentRotatingFileHandler | None = None
_cli_logger = logging.getLogger("mincoins.cli")


def _default_config_path() -> str:
    home_default = Path("~/.mincoins/config/mincoins.yaml").expanduser()
    if home_default.exists():
        return str(home_default)
    return "config/mincoins.yaml"


def _load_config_or_default(config_path: Path) -> ProgramConfig:
    if config_path.exists():
        return load_program_config(config_path)
    _cli_logger.debug("config %s not found; using built-in defaults", config_path)
    return default_program_config()


def _initialize_cli_file_logging(home_dir: str, *, log_level: str | None) -> None:
    global _cli_file_logger_initialized, _cli_file_log_handler
    if not _cli_file_logger_initialized:
        _cli_file_log_handler = attach_file_logging(
            service_name=_CLI_SERVICE_NAME, home_dir=home_dir, log_level=log_level
        )
        _cli_file_logger_initialized = True
        return
    apply_level_to_root(
        effective_level=coerce_log_level(log_level),
        logger=_cli_logger,
        handler=_cli_file_log_handler,
    )


def _parse_target(raw: str) -> int:
    try:
        target = int(str(raw).strip())
    except ValueError as exc:
        raise ValueError(f"target must be a positive number, got {raw!r}") from exc
    if target < 1:
        raise ValueError(f"target must be a positive number, got {raw!r}")
    return target


def _parse_denominations_arg(raw: str) -> tuple[int, ...]:
    items = [part.strip() for part in raw.split(",") if part.strip()]
    if not items:
        raise ValueError("--denominations must list at least one coin value")
    values: list[int] = []
    for item in items:
        try:
            value = int(item)
        except ValueError as exc:
            raise ValueError(f"--denominations value {item!r} is not an integer") from exc
        if value <= 0:
            raise ValueError(f"--denominations values must be positive, got {value}")
        values.append(value)
    return tuple(sorted(set(values)))


def _check_timeout(timeout_seconds: float | None) -> None:
    if timeout_seconds is not None and timeout_seconds < 0:
        raise ValueError(f"--timeout must be >= 0 seconds, got {timeout_seconds}")


def _resolve_denominations(
    program: ProgramConfig, *, currency: str | None, denominations: str | None
) -> tuple[int, ...]:
    if denominations:
        return _parse_denominations_arg(denominations)
    return program.denominations_for(currency)


def _solve(
    *,
    program: ProgramConfig,
    target_raw: str,
    currency: str | None,
    denominations: str | None,
    seed: bool,
    timeout_seconds: float | None,
    as_json: bool,
    show_stats: bool,
) -> int:
    try:
        target = _parse_target(target_raw)
        _check_timeout(timeout_seconds)
        coins = _resolve_denominations(program, currency=currency, denominations=denominations)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    options = program.search
    result = find_min_coins(
        coins,
        target,
        seed=seed and options.seed,
        word_limit=options.word_limit,
        max_table_size=options.max_table_size,
        timeout_seconds=timeout_seconds if timeout_seconds is not None else options.timeout_seconds,
    )
    _cli_logger.info(
        "solve target=%s denominations=%s status=%s coins=%s compares=%s",
        target,
        ",".join(str(c) for c in coins),
        result.status,
        result.coin_count,
        result.stats.compares,
    )
    if as_json:
        print(json.dumps(result_to_dict(result)))
    else:
        print(describe_result(result, show_stats=show_stats))
    return 0 if result.found else 1


def _currencies(program: ProgramConfig) -> int:
    for name in sorted(program.currencies):
        marker = "*" if name == program.default_currency else " "
        values = ", ".join(str(v) for v in program.currencies[name])
        print(f"{marker} {name}: {values}")
    return 0


def _validate(config_path: Path) -> int:
    try:
        load_program_config(config_path)
    except (OSError, ValueError) as exc:
        print(f"config validation failed: {exc}", file=sys.stderr)
        return 2
    print("config validation ok")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Find the minimum number of coins that make up a target value"
    )
    parser.add_argument("--config", default=_default_config_path(), help="Path to mincoins.yaml")
    parser.add_argument("--log-level", default=None, help="Override app.log_level")
    parser.add_argument(
        "--no-file-log",
        action="store_true",
        help="Do not write <home_dir>/logs/debug.log",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_solve = sub.add_parser("solve", help="Solve for a target value")
    p_solve.add_argument("target", help="Positive integer target value")
    group = p_solve.add_mutually_exclusive_group()
    group.add_argument("--currency", default=None, help="Named denomination set from config")
    group.add_argument("--denominations", default=None, help="Comma-separated coin values")
    p_solve.add_argument("--no-seed", action="store_true", help="Disable leap-forward seeding")
    p_solve.add_argument("--timeout", type=float, default=None, help="Search deadline in seconds; 0 disables it")
    p_solve.add_argument("--json", action="store_true", help="Print the result as JSON")
    p_solve.add_argument("--show-stats", action="store_true", help="Print the compare count")

    sub.add_parser("currencies", help="List configured denomination sets")
    sub.add_parser("config-validate", help="Validate the configuration file")

    args = parser.parse_args(argv)
    config_path = Path(args.config)

    if args.command == "config-validate":
        raise SystemExit(_validate(config_path))

    try:
        program = _load_config_or_default(config_path)
    except ValueError as exc:
        print(f"Error: invalid config {config_path}: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc
    if not args.no_file_log:
        _initialize_cli_file_logging(
            program.home_dir, log_level=args.log_level or program.app_log_level
        )

    if args.command == "solve":
        code = _solve(
            program=program,
            target_raw=args.target,
            currency=args.currency,
            denominations=args.denominations,
            seed=not args.no_seed,
            timeout_seconds=args.timeout,
            as_json=bool(args.json),
            show_stats=bool(args.show_stats),
        )
    elif args.command == "currencies":
        code = _currencies(program)
    else:
        raise ValueError(f"unsupported command: {args.command}")
    raise SystemExit(code)


if __name__ == "__main__":
    main()
