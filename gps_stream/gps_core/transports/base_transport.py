"""Abstract read-only byte source for GPS receivers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseGPSTransport(ABC):
    """Read-only transport delivering raw receiver bytes.

    Subclasses open/close the underlying link and return whatever bytes are
    available; framing is left entirely to ``NMEADecoder``.
    """

    def __init__(self) -> None:
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    async def connect(self) -> bool:
        """Open the link. Returns True on success."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the link. Safe to call when already closed."""

    @abstractmethod
    async def read_bytes(self, size: int = 64, timeout: float = 1.0) -> bytes:
        """Return up to ``size`` bytes, or ``b""`` if nothing arrived within ``timeout``."""

    async def __aenter__(self) -> "BaseGPSTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()


__all__ = ["BaseGPSTransport"]
