"""Streaming NMEA-0183 sentence framer and decoder for serial GPS receivers."""

from __future__ import annotations

from importlib import metadata

from .gps_core import (
    CourseSpeed,
    GPSStreamConfig,
    NavMinimum,
    NMEADecoder,
    PositionFix,
    SentenceType,
    TimeDate,
)

try:
    __version__ = metadata.version("gps-stream")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


__all__ = [
    "__version__",
    "CourseSpeed",
    "GPSStreamConfig",
    "NavMinimum",
    "NMEADecoder",
    "PositionFix",
    "SentenceType",
    "TimeDate",
]
