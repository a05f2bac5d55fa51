from __future__ import annotations

import logging
import os
from pathlib import Path

from concurrent_log_handler import ConcurrentRotatingFileHandler

DEFAULT_LOG_LEVEL_NAME = "INFO"
ALLOWED_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"})
DEFAULT_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
DEFAULT_LOG_FILE = "logs/debug.log"
DEFAULT_LOG_MAX_FILES_ROTATION = 4
DEFAULT_LOG_MAX_BYTES_ROTATION = 10 * 1024 * 1024

_package_logger = logging.getLogger("mincoins")


def normalize_log_level_name(log_level: str | None) -> str:
    normalized = str(log_level or "").strip().upper()
    if normalized not in ALLOWED_LOG_LEVELS:
        return DEFAULT_LOG_LEVEL_NAME
    return normalized


def cast_log_level(level_name: str) -> int:
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        return logging.INFO
    return level


def coerce_log_level(log_level: str | None) -> int:
    return cast_log_level(normalize_log_level_name(log_level))


def log_file_path(home_dir: str | Path) -> Path:
    return (Path(home_dir).expanduser() / DEFAULT_LOG_FILE).resolve()


def create_rotating_file_handler(
    *, service_name: str, home_dir: str | Path
) -> ConcurrentRotatingFileHandler:
    log_path = log_file_path(home_dir)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(
        fmt=f"%(asctime)s.%(msecs)03d {service_name} %(name)-24s: %(levelname)-8s %(message)s",
        datefmt=DEFAULT_LOG_DATE_FORMAT,
    )
    handler = ConcurrentRotatingFileHandler(
        os.fspath(log_path),
        "a",
        maxBytes=DEFAULT_LOG_MAX_BYTES_ROTATION,
        backupCount=DEFAULT_LOG_MAX_FILES_ROTATION,
        use_gzip=False,
    )
    handler.setFormatter(formatter)
    return handler


def apply_level_to_root(
    *, effective_level: int, logger: logging.Logger, handler: logging.Handler | None
) -> None:
    root_logger = logging.getLogger()
    if handler is not None:
        handler.setLevel(effective_level)
    for existing in root_logger.handlers:
        existing.setLevel(effective_level)
    root_logger.setLevel(effective_level)
    logger.setLevel(effective_level)


def attach_file_logging(
    *, service_name: str, home_dir: str | Path, log_level: str | None
) -> ConcurrentRotatingFileHandler:
    """Install a rotating file handler on the root logger at ``log_level``."""
    handler = create_rotating_file_handler(service_name=service_name, home_dir=home_dir)
    logging.getLogger().addHandler(handler)
    apply_level_to_root(
        effective_level=coerce_log_level(log_level),
        logger=_package_logger,
        handler=handler,
    )
    return handler
