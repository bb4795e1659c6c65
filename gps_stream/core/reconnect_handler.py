"""
Self-healing reconnection for byte-stream handlers.

A handler whose link drops, or whose reads keep failing, asks the mixin to
reopen the transport a bounded number of times with exponential backoff
instead of exiting its read loop on the first error burst.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .logging_utils import get_module_logger

logger = get_module_logger("ReconnectHandler")


class ReconnectState(Enum):
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


@dataclass
class ReconnectConfig:
    """Circuit breaker thresholds and reconnect backoff."""
    # Read errors in a row before the breaker trips
    max_consecutive_errors: int = 10
    error_backoff: float = 0.1
    max_error_backoff: float = 2.0

    max_reconnect_attempts: int = 5
    base_reconnect_delay: float = 1.0
    max_reconnect_delay: float = 30.0
    backoff_factor: float = 2.0
    jitter_factor: float = 0.1

    @classmethod
    def default(cls) -> "ReconnectConfig":
        return cls()

    @classmethod
    def with_delay(cls, base_delay: float) -> "ReconnectConfig":
        """Default thresholds with a custom first reconnect delay."""
        return cls(base_reconnect_delay=base_delay)

    def error_delay(self, consecutive_errors: int) -> float:
        """Pause after the Nth read error in a row."""
        return min(self.error_backoff * (2 ** (consecutive_errors - 1)), self.max_error_backoff)

    def reconnect_delay(self, attempt: int) -> float:
        """Delay before reconnect ``attempt`` (1-based), without jitter."""
        return min(
            self.base_reconnect_delay * (self.backoff_factor ** (attempt - 1)),
            self.max_reconnect_delay,
        )


class ReconnectingMixin:
    """
    Adds bounded reconnect-with-backoff to a handler.

    The host class calls ``_init_reconnect`` from its constructor and
    implements ``_attempt_reconnect``. Its read loop then does:

        if not await self._on_circuit_breaker_triggered():
            break  # gave up
        continue   # link is back
    """

    _reconnect_config: ReconnectConfig
    _reconnect_state: ReconnectState
    _reconnect_attempt: int
    _reconnect_device_id: str

    def _init_reconnect(self, device_id: str, config: Optional[ReconnectConfig] = None) -> None:
        self._reconnect_config = config or ReconnectConfig.default()
        self._reconnect_state = ReconnectState.CONNECTED
        self._reconnect_attempt = 0
        self._reconnect_device_id = device_id

    async def _on_circuit_breaker_triggered(self) -> bool:
        """
        Try to reopen the link until it works or attempts run out.

        Returns:
            True once reconnected, False after the last attempt fails
        """
        config = self._reconnect_config
        device_id = self._reconnect_device_id

        while self._reconnect_attempt < config.max_reconnect_attempts:
            self._reconnect_state = ReconnectState.RECONNECTING
            self._reconnect_attempt += 1

            delay = config.reconnect_delay(self._reconnect_attempt)
            delay += delay * config.jitter_factor * random.random()
            logger.info(
                "Reconnecting %s (attempt %d/%d) in %.1fs",
                device_id, self._reconnect_attempt, config.max_reconnect_attempts, delay,
            )
            await asyncio.sleep(delay)

            started = time.perf_counter()
            try:
                reopened = await self._attempt_reconnect()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("Reconnect attempt %d for %s raised: %s", self._reconnect_attempt, device_id, e)
                continue

            elapsed_ms = (time.perf_counter() - started) * 1000
            if reopened:
                logger.info(
                    "Reconnected %s in %.1fms (attempt %d)",
                    device_id, elapsed_ms, self._reconnect_attempt,
                )
                self.reset_reconnect_state()
                return True
            logger.warning(
                "Reconnect attempt %d for %s failed (%.1fms)",
                self._reconnect_attempt, device_id, elapsed_ms,
            )

        self._reconnect_state = ReconnectState.FAILED
        logger.error("Giving up on %s after %d reconnect attempts", device_id, self._reconnect_attempt)
        return False

    async def _attempt_reconnect(self) -> bool:
        raise NotImplementedError("ReconnectingMixin hosts must implement _attempt_reconnect()")

    @property
    def reconnect_state(self) -> ReconnectState:
        return self._reconnect_state

    @property
    def reconnect_failed(self) -> bool:
        return self._reconnect_state is ReconnectState.FAILED

    def reset_reconnect_state(self) -> None:
        """Forget past attempts and errors (after a successful reopen)."""
        self._reconnect_state = ReconnectState.CONNECTED
        self._reconnect_attempt = 0
        if hasattr(self, "_consecutive_errors"):
            self._consecutive_errors = 0


__all__ = ["ReconnectConfig", "ReconnectState", "ReconnectingMixin"]
