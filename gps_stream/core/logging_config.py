"""Root logging setup shared by the gps-stream entry points."""

from __future__ import annotations

import contextlib
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, List, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_MAX_BYTES = 500 * 1024
_DEFAULT_BACKUP_COUNT = 2

# Chatty third-party loggers capped at WARNING
NOISY_LOGGERS = ("serial", "serial_asyncio", "asyncio")

_configured = False


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")
    return numeric


def _console_handler() -> logging.Handler:
    return logging.StreamHandler(sys.stdout)


def _file_handler(log_file: Union[str, Path], max_bytes: int, backup_count: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    force: bool = False,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = _DEFAULT_MAX_BYTES,
    backup_count: int = _DEFAULT_BACKUP_COUNT,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Install stdout and optional rotating-file handlers on the root logger.

    A second call only adjusts the level unless ``force`` is set.

    Args:
        level: Level name ("debug", "info", ...) or number.
        force: Replace existing handlers even if already configured.
        console: Log to stdout.
        log_file: Also log to this file, rotated at ``max_bytes``.
        max_bytes: Rotation size for ``log_file``.
        backup_count: Rotated files kept next to ``log_file``.
        quiet_loggers: Logger names capped at WARNING.
    """
    global _configured
    numeric_level = _coerce_level(level)
    root = logging.getLogger()
    root.setLevel(numeric_level)

    if _configured and not force:
        return

    for handler in list(root.handlers):
        root.removeHandler(handler)
        with contextlib.suppress(Exception):
            handler.close()

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(_console_handler())
    if log_file:
        handlers.append(_file_handler(log_file, max_bytes, backup_count))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if not handlers:
        root.addHandler(logging.NullHandler())

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


__all__ = ["configure_logging", "LOG_FORMAT", "LOG_DATEFMT", "NOISY_LOGGERS"]
