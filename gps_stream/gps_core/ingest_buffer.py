"""Bounded byte accumulation buffer fed one octet at a time."""

from __future__ import annotations

from typing import Optional

from .constants import DEFAULT_BUFFER_SIZE, NULL_BYTE


class RawBuffer:
    """Fixed-capacity byte buffer with a write cursor and last-modified time.

    The cursor never exceeds ``capacity - 1``; bytes arriving past that point
    are dropped and counted in ``dropped``. The storage is allocated once and
    reused, so ``append`` does no allocation.

    Not thread-safe on its own; ``NMEADecoder`` serializes access.
    """

    __slots__ = ("_chars", "_capacity", "_length", "updated_at", "dropped")

    def __init__(self, capacity: int = DEFAULT_BUFFER_SIZE) -> None:
        if capacity < 2:
            raise ValueError(f"Buffer capacity must be at least 2 (got {capacity})")
        self._chars = bytearray(capacity)
        self._capacity = capacity
        self._length = 0
        self.updated_at = 0.0
        self.dropped = 0

    def __len__(self) -> int:
        return self._length

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return self._length >= self._capacity - 1

    def append(self, byte: int, now: float) -> bool:
        """Store ``byte`` if room remains. Returns True if it was stored.

        The timestamp is updated on every call, stored or not.
        """
        self.updated_at = now
        if byte == NULL_BYTE:
            return False
        if self._length >= self._capacity - 1:
            self.dropped += 1
            return False
        self._chars[self._length] = byte
        self._length += 1
        return True

    def snapshot(self) -> bytes:
        """Immutable copy of the stored bytes."""
        return bytes(self._chars[:self._length])

    def consume(self, count: int) -> None:
        """Drop the first ``count`` bytes, shifting the remainder to the front."""
        if count <= 0:
            return
        if count >= self._length:
            self.clear()
            return
        remaining = self._length - count
        self._chars[:remaining] = self._chars[count:self._length]
        self._chars[remaining:self._length] = bytes(count)
        self._length = remaining

    def clear(self, now: Optional[float] = None) -> None:
        """Discard everything; optionally restamp the last-modified time."""
        self._chars[:self._length] = bytes(self._length)
        self._length = 0
        if now is not None:
            self.updated_at = now

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return (
            f"RawBuffer(length={self._length}, capacity={self._capacity}, "
            f"dropped={self.dropped})"
        )


__all__ = ["RawBuffer"]
