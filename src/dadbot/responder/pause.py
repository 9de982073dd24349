"""Process-wide paused mode with lazy expiry."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

import structlog

logger = structlog.get_logger()

Clock = Callable[[], float]


class PauseState:
    """Two-state machine: idle, or paused until ``expires_at``.

    There is no timer. Expiry is noticed by whichever reader first calls
    ``is_active()`` at or after ``expires_at``; that reader flips the state
    back to idle, so the transition is observed once.
    """

    def __init__(self, *, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._active = False
        self._expires_at = 0.0

    @property
    def expires_at(self) -> float | None:
        with self._lock:
            return self._expires_at if self._active else None

    def is_active(self) -> bool:
        with self._lock:
            if not self._active:
                return False
            if self._clock() < self._expires_at:
                return True
            self._active = False
            expired_at = self._expires_at

        logger.info("pause.expired", expired_at=expired_at, event_name="pause_expired")
        return False

    def pause(self, duration_s: float) -> float:
        """Enter paused mode for ``duration_s`` seconds and return the expiry.

        Re-triggering while already paused leaves the current expiry alone.
        """
        with self._lock:
            now = self._clock()
            if self._active and now < self._expires_at:
                return self._expires_at
            self._active = True
            self._expires_at = now + max(0.0, float(duration_s))
            return self._expires_at

    def remaining(self) -> float:
        """Seconds left in the current pause, 0 when idle or already expired."""
        with self._lock:
            if not self._active:
                return 0.0
            return max(0.0, self._expires_at - self._clock())

    def clear(self) -> None:
        with self._lock:
            self._active = False
            self._expires_at = 0.0
