"""Per-feature cooldown gate."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

Clock = Callable[[], float]


class CooldownGuard:
    """Lets a feature fire at most once every ``window`` seconds.

    ``try_acquire`` is a single compare-and-set under a lock, so concurrent
    callers racing on an elapsed window see exactly one ``True``.
    """

    def __init__(self, name: str, window: float, *, clock: Clock = time.monotonic) -> None:
        if window < 0:
            raise ValueError("cooldown window must be >= 0")
        self.name = name
        self.window = float(window)
        self._clock = clock
        self._lock = threading.Lock()
        self._last_fired_at: float | None = None

    @property
    def last_fired_at(self) -> float | None:
        with self._lock:
            return self._last_fired_at

    def try_acquire(self, window: float | None = None) -> bool:
        """Record a fire and return True if the window has elapsed, else False."""
        limit = self.window if window is None else float(window)
        with self._lock:
            now = self._clock()
            if self._last_fired_at is not None and now - self._last_fired_at < limit:
                return False
            self._last_fired_at = now
            return True

    def remaining(self) -> float:
        """Seconds until the next acquire can succeed (0 if it would now)."""
        with self._lock:
            if self._last_fired_at is None:
                return 0.0
            return max(0.0, self.window - (self._clock() - self._last_fired_at))

    def reset(self) -> None:
        with self._lock:
            self._last_fired_at = None

    def __repr__(self) -> str:
        return f"<CooldownGuard {self.name} {self.window:g}s>"
