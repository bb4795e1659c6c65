"""GPS stream handlers."""

from .base_handler import BaseGPSHandler
from .gps_handler import GPSStreamHandler

__all__ = ["BaseGPSHandler", "GPSStreamHandler"]
