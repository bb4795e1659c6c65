"""Base GPS Handler

Abstract base class wiring a byte transport to an ``NMEADecoder``. Two tasks
share the decoder: a reader task that feeds every received byte into it, and a
processing task that wakes periodically to run decode passes. The reader never
waits on decoding, and decoding never suspends mid-pass.

A dropped link or a run of read errors sends the reader through
ReconnectingMixin, which reopens the transport with exponential backoff.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Set

from gps_stream.core.logging_utils import get_module_logger
from gps_stream.core.reconnect_handler import ReconnectConfig, ReconnectingMixin

from ..constants import DEFAULT_PROCESS_INTERVAL, DEFAULT_READ_SIZE
from ..decoder import NMEADecoder
from ..parsers.nmea_grammar import SentenceType
from ..parsers.nmea_types import BaseRecord
from ..result_store import ResultStore
from ..transports import BaseGPSTransport

logger = get_module_logger("GPSHandler")

DataCallback = Callable[[str, SentenceType, BaseRecord], Awaitable[None]]


def _task_exception_handler(task: asyncio.Task) -> None:
    """Handle exceptions from fire-and-forget tasks."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Unhandled exception in GPS background task: %s", exc)


class BaseGPSHandler(ABC, ReconnectingMixin):
    """Abstract base class for GPS stream handlers.

    Each receiver gets its own handler instance and its own decoder context.
    """

    def __init__(
        self,
        device_id: str,
        transport: BaseGPSTransport,
        decoder: Optional[NMEADecoder] = None,
        *,
        process_interval_s: float = DEFAULT_PROCESS_INTERVAL,
        read_size: int = DEFAULT_READ_SIZE,
        reconnect_config: Optional[ReconnectConfig] = None,
    ):
        """Initialize the handler.

        Args:
            device_id: Unique identifier for this device (e.g., "GPS:serial0")
            transport: Byte source for the receiver
            decoder: Decoder context (a default one is created if omitted)
            process_interval_s: How often the processing task runs a pass
            read_size: Maximum bytes requested per transport read
            reconnect_config: Circuit breaker and reconnect tuning
        """
        self.device_id = device_id
        self.transport = transport
        self.decoder = decoder if decoder is not None else NMEADecoder()
        self.process_interval_s = process_interval_s
        self.read_size = read_size

        # Callback for new records (set by the owner)
        self.data_callback: Optional[DataCallback] = None

        self._running = False
        self._read_task: Optional[asyncio.Task] = None
        self._process_task: Optional[asyncio.Task] = None

        self._consecutive_errors = 0
        self._init_reconnect(device_id=device_id, config=reconnect_config)

        self._pending_tasks: Set[asyncio.Task] = set()

    @property
    def store(self) -> ResultStore:
        return self.decoder.store

    @property
    def is_connected(self) -> bool:
        return self.transport.is_connected if self.transport else False

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # Lifecycle Methods
    # =========================================================================

    async def start(self) -> None:
        """Start the reader and processing tasks."""
        if self._running:
            logger.warning("Handler %s already running", self.device_id)
            return

        self._running = True
        self._read_task = asyncio.create_task(self._read_loop())
        self._process_task = asyncio.create_task(self._process_loop())
        logger.info("GPS handler started for %s", self.device_id)

    async def stop(self) -> None:
        """Stop both tasks and any pending callbacks."""
        self._running = False

        for task in (self._read_task, self._process_task):
            if task is None:
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._read_task = None
        self._process_task = None

        for task in self._pending_tasks:
            if not task.done():
                task.cancel()
        self._pending_tasks.clear()

        logger.info("GPS handler stopped for %s", self.device_id)

    # =========================================================================
    # Producer: transport -> decoder
    # =========================================================================

    async def _read_loop(self) -> None:
        """Feed every received byte into the decoder.

        Reconnects through the circuit breaker when the transport drops or
        too many consecutive errors occur.
        """
        logger.debug("Read loop started for %s", self.device_id)
        self._consecutive_errors = 0

        while self._running:
            if not self.is_connected:
                logger.warning("GPS device %s disconnected, attempting reconnect", self.device_id)
                if not await self._on_circuit_breaker_triggered():
                    logger.error("Reconnection failed for %s - exiting read loop", self.device_id)
                    break
                continue

            try:
                chunk = await self.transport.read_bytes(self.read_size, timeout=1.0)
            except asyncio.CancelledError:
                break
            except Exception as e:
                if not await self._on_read_error(e):
                    break
                continue

            if chunk:
                self._consecutive_errors = 0
                self.decoder.feed(chunk)
                await asyncio.sleep(0)
            else:
                await asyncio.sleep(0.01)

        logger.debug(
            "Read loop ended for %s (running=%s, connected=%s, errors=%d, reconnect_state=%s)",
            self.device_id,
            self._running,
            self.is_connected,
            self._consecutive_errors,
            self._reconnect_state.value,
        )

    async def _on_read_error(self, error: Exception) -> bool:
        """Back off after a failed read; trip the breaker once errors pile up.

        Returns False when the read loop should exit.
        """
        self._consecutive_errors += 1
        config = self._reconnect_config
        logger.error(
            "Read error on %s (%d/%d): %s",
            self.device_id, self._consecutive_errors, config.max_consecutive_errors, error,
        )
        if self._consecutive_errors < config.max_consecutive_errors:
            await asyncio.sleep(config.error_delay(self._consecutive_errors))
            return True

        logger.warning("Circuit breaker tripped for %s - reopening transport", self.device_id)
        if await self._on_circuit_breaker_triggered():
            return True
        logger.error("Reconnection failed for %s - exiting read loop", self.device_id)
        return False

    async def _attempt_reconnect(self) -> bool:
        """Disconnect, let the OS release the port, then connect again.

        Bytes buffered before the drop are discarded; they cannot be joined to
        whatever the receiver sends next.
        """
        if not self.transport:
            return False
        await self.transport.disconnect()
        await asyncio.sleep(0.2)
        if await self.transport.connect():
            logger.info("GPS transport reconnected for %s", self.device_id)
            self.decoder.clear()
            return True
        logger.warning("GPS transport reconnect failed for %s", self.device_id)
        return False

    # =========================================================================
    # Consumer: periodic decode passes
    # =========================================================================

    async def _process_loop(self) -> None:
        logger.debug("Process loop started for %s", self.device_id)
        while self._running:
            try:
                updated = self.decoder.process()
                if updated:
                    self._handle_updates(updated)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Error in GPS process pass for %s", self.device_id)
            await asyncio.sleep(self.process_interval_s)

    @abstractmethod
    def _handle_updates(self, updated: List[SentenceType]) -> None:
        """React to sentence types that received a new record this pass."""
        ...

    def _dispatch(self, sentence_type: SentenceType, record: BaseRecord) -> None:
        """Hand a new record to ``data_callback`` in a tracked background task."""
        if self.data_callback:
            self._create_background_task(
                self.data_callback(self.device_id, sentence_type, record)
            )

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending_tasks.discard(task)
        _task_exception_handler(task)

    def _create_background_task(self, coro) -> asyncio.Task:
        """Create a tracked background task with exception handling."""
        task = asyncio.create_task(coro)
        self._pending_tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task


__all__ = ["BaseGPSHandler", "DataCallback"]
