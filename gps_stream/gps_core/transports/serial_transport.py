"""Serial UART byte source for GPS receivers.

Reads go through serial_asyncio. Chunks are returned exactly as the UART
delivers them; sentence framing belongs to ``NMEADecoder``.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

import serial
import serial_asyncio

from gps_stream.core.logging_utils import get_module_logger

from ..constants import DEFAULT_BAUD_RATE, DEFAULT_READ_SIZE
from .base_transport import BaseGPSTransport

logger = get_module_logger("SerialGPSTransport")

CLOSE_TIMEOUT_S = 1.0


class SerialGPSTransport(BaseGPSTransport):
    """Byte source backed by a serial port.

    Example:
        async with SerialGPSTransport("/dev/serial0", 9600) as transport:
            while transport.is_connected:
                decoder.feed(await transport.read_bytes())
    """

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUD_RATE):
        """
        Args:
            port: Serial device path (e.g. '/dev/serial0', '/dev/ttyUSB0')
            baudrate: Line speed; most NMEA receivers ship at 9600
        """
        super().__init__()
        self.port = port
        self.baudrate = baudrate

        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._last_error: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        return self._connected and self._reader is not None

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    async def connect(self) -> bool:
        """Open the port. Returns False (and records ``last_error``) on failure."""
        if self.is_connected:
            logger.debug("Already connected to %s", self.port)
            return True

        try:
            self._reader, self._writer = await serial_asyncio.open_serial_connection(
                url=self.port,
                baudrate=self.baudrate,
            )
        except asyncio.CancelledError:
            raise
        except (serial.SerialException, OSError, ValueError) as exc:
            self._reader = self._writer = None
            self._mark_lost(str(exc))
            logger.warning("Cannot open %s at %d baud: %s", self.port, self.baudrate, exc)
            return False

        self._connected = True
        self._last_error = None
        logger.info("Opened %s at %d baud", self.port, self.baudrate)
        return True

    async def disconnect(self) -> None:
        """Close the port. Safe to call repeatedly."""
        writer, self._writer, self._reader = self._writer, None, None
        self._connected = False
        if writer is None:
            return

        with contextlib.suppress(Exception):
            writer.close()
        try:
            await asyncio.wait_for(writer.wait_closed(), timeout=CLOSE_TIMEOUT_S)
        except asyncio.TimeoutError:
            logger.debug("Timed out closing %s", self.port)
        except (serial.SerialException, OSError) as exc:
            logger.debug("Error closing %s: %s", self.port, exc)

        logger.info("Closed %s", self.port)

    async def read_bytes(self, size: int = DEFAULT_READ_SIZE, timeout: float = 1.0) -> bytes:
        """Return up to ``size`` bytes.

        A quiet line yields ``b""`` and stays connected. A read error or EOF
        yields ``b""`` and marks the transport lost so the handler reconnects.
        """
        if not self.is_connected:
            return b""

        try:
            data = await asyncio.wait_for(self._reader.read(size), timeout=timeout)
        except asyncio.TimeoutError:
            return b""
        except asyncio.CancelledError:
            raise
        except (serial.SerialException, OSError) as exc:
            self._mark_lost(str(exc))
            logger.warning("Read error on %s: %s", self.port, exc)
            return b""

        if not data:
            self._mark_lost("Stream ended (EOF)")
            logger.warning("Serial stream ended on %s (EOF)", self.port)
        return data

    def _mark_lost(self, reason: str) -> None:
        self._last_error = reason
        self._connected = False


__all__ = ["SerialGPSTransport"]
