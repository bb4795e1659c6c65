"""Streaming NMEA decoder: byte ingest plus periodic scan-and-dispatch passes.

``NMEADecoder`` is the caller-owned context that ties the pieces together:

* ``ingest``/``feed`` append bytes to a bounded ``RawBuffer`` (producer side).
* ``process`` waits for a quiet gap after the last byte, snapshots the buffer,
  runs every enabled sentence decoder over the snapshot and publishes the
  resulting records to the ``ResultStore`` (consumer side).

After a pass the buffer advances past every matched sentence and any
terminated garbage, keeping only a trailing ``$...`` fragment that is still
arriving. A full buffer is discarded wholesale.
"""

from __future__ import annotations

import re
import threading
import time
from typing import Callable, Iterable, List, Optional

from gps_stream.core.logging_utils import get_module_logger

from .constants import DEFAULT_BUFFER_SIZE, DEFAULT_IDLE_MS, SENTENCE_START
from .ingest_buffer import RawBuffer
from .parsers.nmea_grammar import TERMINATOR_PATTERN, SentenceType
from .parsers.nmea_parser import SentenceDecoder, create_decoders
from .parsers.nmea_types import BaseRecord
from .result_store import ResultStore

logger = get_module_logger("NMEADecoder")

RecordCallback = Callable[[SentenceType, BaseRecord], None]
ByteTee = Callable[[int], None]

_TERMINATOR = re.compile(TERMINATOR_PATTERN)


def _pending_fragment_start(text: str, start: int) -> int:
    """Offset of a trailing unterminated ``$`` fragment at or after ``start``.

    Returns ``len(text)`` when there is none, meaning everything may go.
    """
    idx = text.rfind(SENTENCE_START, start)
    if idx == -1 or _TERMINATOR.search(text, idx):
        return len(text)
    return idx


class NMEADecoder:
    """Caller-owned streaming decoder context.

    Args:
        enabled: Sentence types to decode (default: all), tried in fixed
            priority order GGA, RMC, VTG, ZDA.
        buffer_size: Capacity of the accumulation buffer in bytes.
        idle_s: Quiet time after the last byte before a pass is attempted.
        validate_checksums: Reject sentences whose XOR checksum mismatches.
        clock: Monotonic time source used when ``now`` is not supplied.
        on_record: Called as ``on_record(sentence_type, record)`` for every
            newly decoded record.
        tee: Called with every ingested byte (raw debug echo).

    Example:
        decoder = NMEADecoder(enabled=[SentenceType.GGA, SentenceType.RMC])
        for byte in chunk:
            decoder.ingest(byte)
        for sentence_type in decoder.process():
            print(decoder.get(sentence_type))
    """

    def __init__(
        self,
        enabled: Optional[Iterable[SentenceType]] = None,
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        idle_s: float = DEFAULT_IDLE_MS / 1000.0,
        validate_checksums: bool = True,
        clock: Callable[[], float] = time.monotonic,
        on_record: Optional[RecordCallback] = None,
        tee: Optional[ByteTee] = None,
    ) -> None:
        if idle_s < 0:
            raise ValueError(f"idle_s must be non-negative (got {idle_s})")

        self._decoders: List[SentenceDecoder] = create_decoders(enabled, validate_checksums)
        if not self._decoders:
            raise ValueError("At least one sentence type must be enabled")

        self._buffer = RawBuffer(buffer_size)
        self._store = ResultStore(d.sentence_type for d in self._decoders)
        self._lock = threading.Lock()
        # Bumped on every wholesale clear so an in-flight pass does not trim fresh bytes.
        self._generation = 0

        self.idle_s = idle_s
        self.validate_checksums = validate_checksums
        self.on_record = on_record
        self.tee = tee
        self._clock = clock

        self.overflow_count = 0

    # ------------------------------------------------------------------
    # Properties

    @property
    def store(self) -> ResultStore:
        return self._store

    @property
    def buffer(self) -> RawBuffer:
        return self._buffer

    @property
    def enabled_sentences(self) -> tuple[SentenceType, ...]:
        return tuple(d.sentence_type for d in self._decoders)

    @property
    def pending_bytes(self) -> int:
        return len(self._buffer)

    def get(self, sentence_type: SentenceType) -> BaseRecord:
        """Latest record of ``sentence_type`` (default record before the first decode)."""
        return self._store.get(sentence_type)

    # ------------------------------------------------------------------
    # Producer side

    def ingest(self, byte: int, now: Optional[float] = None) -> None:
        """Append one byte. Never parses, never raises for data reasons."""
        if now is None:
            now = self._clock()
        if self.tee is not None:
            self.tee(byte)
        with self._lock:
            self._buffer.append(byte, now)

    def feed(self, data: bytes, now: Optional[float] = None) -> None:
        """Ingest a chunk one byte at a time."""
        if now is None:
            now = self._clock()
        for byte in data:
            self.ingest(byte, now)

    # ------------------------------------------------------------------
    # Consumer side

    def clear(self, now: Optional[float] = None) -> None:
        """Caller-forced discard of everything buffered."""
        with self._lock:
            self._buffer.clear(self._clock() if now is None else now)
            self._generation += 1

    def process(self, now: Optional[float] = None, *, force: bool = False) -> List[SentenceType]:
        """Run one scan-and-dispatch pass.

        Args:
            now: Current monotonic time (defaults to the decoder clock).
            force: Skip the idle-time debounce.

        Returns:
            Sentence types that received a new record in this pass.
        """
        if now is None:
            now = self._clock()

        with self._lock:
            buffer = self._buffer
            if not len(buffer):
                return []
            if buffer.is_full:
                logger.debug(
                    "Buffer full (%d bytes, %d dropped) - discarding for resync",
                    len(buffer), buffer.dropped,
                )
                buffer.clear(now)
                self._generation += 1
                self.overflow_count += 1
                return []
            if not force and now - buffer.updated_at < self.idle_s:
                return []
            snapshot = buffer.snapshot()
            generation = self._generation

        # One character per byte, so string offsets are buffer offsets.
        text = snapshot.decode("ascii", errors="replace")

        updated: List[SentenceType] = []
        new_records = []
        matched_end = 0
        for decoder in self._decoders:
            for (_start, stop), record in decoder.scan(text, now):
                self._store.update(decoder.sentence_type, record)
                new_records.append((decoder.sentence_type, record))
                if decoder.sentence_type not in updated:
                    updated.append(decoder.sentence_type)
                matched_end = max(matched_end, stop)

        consumed = _pending_fragment_start(text, matched_end)
        with self._lock:
            if generation == self._generation:
                self._buffer.consume(consumed)

        if not updated and consumed:
            logger.debug("Discarded %d bytes with no recognisable sentence", consumed)

        if self.on_record is not None:
            for sentence_type, record in new_records:
                self.on_record(sentence_type, record)

        return updated

    def reset(self) -> None:
        """Clear the buffer and return every record slot to its default."""
        self.clear()
        self._store.reset()
        self.overflow_count = 0


__all__ = ["NMEADecoder", "RecordCallback", "ByteTee"]
