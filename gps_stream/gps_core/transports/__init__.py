"""GPS byte-source transports."""

from .base_transport import BaseGPSTransport
from .serial_transport import SerialGPSTransport

__all__ = ["BaseGPSTransport", "SerialGPSTransport"]
