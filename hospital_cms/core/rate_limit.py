"""In-memory per-key sliding-window rate limiting for the HTTP layer."""

import math
import threading
import time
from collections.abc import Callable


class SlidingWindowRateLimiter:
    """
    Allow at most max_attempts hits per key within window_seconds.

    State is process-local; instances are created per application and shared
    across worker threads, so access is serialised with a lock. Keys with no
    hit inside the window are dropped at most one window after going idle.
    """

    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, list[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        """Number of keys currently tracked."""
        with self._lock:
            return len(self._hits)

    def _sweep(self, cutoff: float) -> None:
        stale = [key for key, stamps in self._hits.items() if stamps[-1] <= cutoff]
        for key in stale:
            del self._hits[key]

    def hit(self, key: str) -> tuple[bool, int]:
        """Record one hit for key. Returns (allowed, retry_after_seconds)."""
        now = self._clock()
        cutoff = now - self.window_seconds
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now
            recent = [ts for ts in self._hits.get(key, []) if ts > cutoff]
            if len(recent) >= self.max_attempts:
                self._hits[key] = recent
                retry_after = max(1, math.ceil(recent[0] + self.window_seconds - now))
                return False, retry_after
            recent.append(now)
            self._hits[key] = recent
            return True, 0

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
