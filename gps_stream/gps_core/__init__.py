"""GPS core package - streaming NMEA framing, decoding and I/O."""

from .constants import (
    KMH_PER_KNOT,
    DATE_CENTURY_OFFSET,
    NEVER_UPDATED,
    FIX_QUALITY_DESCRIPTIONS,
    MODE_DESCRIPTIONS,
    DEFAULT_BUFFER_SIZE,
    DEFAULT_IDLE_MS,
    DEFAULT_BAUD_RATE,
    DEFAULT_RECONNECT_DELAY,
)
from .parsers import (
    CourseSpeed,
    NavMinimum,
    PositionFix,
    SentenceType,
    TimeDate,
    compute_checksum,
    validate_checksum,
)
from .ingest_buffer import RawBuffer
from .result_store import ResultStore
from .decoder import NMEADecoder
from .config import GPSStreamConfig
from .transports import BaseGPSTransport, SerialGPSTransport
from .handlers import BaseGPSHandler, GPSStreamHandler

__all__ = [
    # Constants
    "KMH_PER_KNOT",
    "DATE_CENTURY_OFFSET",
    "NEVER_UPDATED",
    "FIX_QUALITY_DESCRIPTIONS",
    "MODE_DESCRIPTIONS",
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_IDLE_MS",
    "DEFAULT_BAUD_RATE",
    "DEFAULT_RECONNECT_DELAY",
    # Records
    "CourseSpeed",
    "NavMinimum",
    "PositionFix",
    "SentenceType",
    "TimeDate",
    # Checksum helpers
    "compute_checksum",
    "validate_checksum",
    # Decoder
    "RawBuffer",
    "ResultStore",
    "NMEADecoder",
    "GPSStreamConfig",
    # Transport
    "BaseGPSTransport",
    "SerialGPSTransport",
    # Handlers
    "BaseGPSHandler",
    "GPSStreamHandler",
]
