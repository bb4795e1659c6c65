"""Component-tagged loggers for the gps-stream package."""

from __future__ import annotations

import logging
from typing import Optional

MODULE_LOGGER_NAMESPACE = "gps_stream"
DEFAULT_COMPONENT = "Core"


def _normalize_logger_name(name: Optional[str]) -> str:
    if not name:
        return MODULE_LOGGER_NAMESPACE
    if name == MODULE_LOGGER_NAMESPACE or name.startswith(f"{MODULE_LOGGER_NAMESPACE}."):
        return name
    return f"{MODULE_LOGGER_NAMESPACE}.{name}"


def _derive_component(name: str) -> str:
    suffix = name[len(MODULE_LOGGER_NAMESPACE):].lstrip(".")
    return suffix.rsplit(".", 1)[-1] or DEFAULT_COMPONENT


class StructuredLogger:
    """Wraps a stdlib logger and prefixes every message with ``[Component]``.

    Anything not defined here (``setLevel``, ``handlers``, ...) is forwarded
    to the wrapped logger.
    """

    __slots__ = ("_logger", "_component")

    def __init__(self, logger: logging.Logger, component: Optional[str] = None) -> None:
        self._logger = logger
        self._component = component or _derive_component(logger.name)

    def __getattr__(self, item):
        return getattr(self._logger, item)

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def component(self) -> str:
        return self._component

    def _compose(self, message: object, args: tuple) -> str:
        text = str(message)
        if args:
            try:
                text = text % args
            except (TypeError, ValueError):
                text = f"{text} | args={' '.join(str(arg) for arg in args)}"
        return f"[{self._component}] {text}"

    def _emit(self, level: int, message: object, args: tuple, **kwargs) -> None:
        # The decoder logs from its hot path; skip formatting when disabled.
        if self._logger.isEnabledFor(level):
            self._logger.log(level, self._compose(message, args), **kwargs)

    def log(self, level: int, message: object, *args, **kwargs) -> None:
        self._emit(level, message, args, **kwargs)

    def debug(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.DEBUG, message, args, **kwargs)

    def info(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.INFO, message, args, **kwargs)

    def warning(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.WARNING, message, args, **kwargs)

    def error(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.ERROR, message, args, **kwargs)

    def exception(self, message: object, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self._emit(logging.ERROR, message, args, **kwargs)


def get_module_logger(name: Optional[str] = None) -> StructuredLogger:
    """Return a structured logger under the ``gps_stream`` namespace."""
    return StructuredLogger(logging.getLogger(_normalize_logger_name(name)))


__all__ = ["MODULE_LOGGER_NAMESPACE", "StructuredLogger", "get_module_logger"]
