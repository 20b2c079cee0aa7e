"""
Circuit breaker guarding Redis publishes.

While Redis is down every publish would otherwise wait for a socket
timeout. After `failure_threshold` consecutive failed publishes the
breaker opens and publishes are skipped; after `recovery_timeout` seconds
a limited number of trial publishes are let through (HALF_OPEN). One
success closes it again, one failed trial reopens it.

Skipped events are not lost: the outbox keeps them PENDING until a
publish succeeds.
"""

from __future__ import annotations

import threading
import time
from enum import Enum

from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(RuntimeError):
    """Publishing is paused until the breaker lets a trial call through."""


class EventCircuitBreaker:
    """Thread-safe; the outbox loop and request threads may share it."""

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        half_open_max_calls: int = 3,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.half_open_max_calls = half_open_max_calls

        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._trial_calls = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    def can_execute(self) -> bool:
        with self._lock:
            if self._state is CircuitState.OPEN:
                if time.monotonic() - self._opened_at < self.recovery_timeout:
                    return False
                self._state = CircuitState.HALF_OPEN
                self._trial_calls = 0
                logger.info("Event circuit breaker half-open, probing Redis")

            if self._state is CircuitState.HALF_OPEN:
                if self._trial_calls >= self.half_open_max_calls:
                    return False
                self._trial_calls += 1
            return True

    def record_success(self) -> None:
        with self._lock:
            if self._state is not CircuitState.CLOSED:
                logger.info("Event circuit breaker closed")
            self._state = CircuitState.CLOSED
            self._failures = 0

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            if self._state is CircuitState.HALF_OPEN or (
                self._state is CircuitState.CLOSED and self._failures >= self.failure_threshold
            ):
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()
                logger.error("Event circuit breaker open", failures=self._failures)


_breaker: EventCircuitBreaker | None = None
_breaker_lock = threading.Lock()


def get_event_circuit_breaker() -> EventCircuitBreaker:
    """Process-wide breaker shared by every publisher."""
    global _breaker
    with _breaker_lock:
        if _breaker is None:
            _breaker = EventCircuitBreaker(
                failure_threshold=settings.redis_publish_max_retries + 2,
            )
        return _breaker
