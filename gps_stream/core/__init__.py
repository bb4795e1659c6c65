"""Shared infrastructure: logging, config loading and reconnection."""

from .config_loader import ConfigLoader
from .logging_config import configure_logging
from .logging_utils import StructuredLogger, get_module_logger
from .reconnect_handler import ReconnectConfig, ReconnectingMixin, ReconnectState

__all__ = [
    "ConfigLoader",
    "configure_logging",
    "StructuredLogger",
    "get_module_logger",
    "ReconnectConfig",
    "ReconnectingMixin",
    "ReconnectState",
]
