"""Client-side login throttle: a UX deterrent, not a security control."""

import math
import time
from collections.abc import Callable

MAX_FAILED_ATTEMPTS = 5
LOCKOUT_SECONDS = 30


class LoginThrottle:
    """
    Count consecutive failed logins for one client session.

    After max_attempts failures, submissions are refused for lockout_seconds,
    and every further failure before a successful login locks again at once.
    Nothing is persisted; a new session (or a direct API call) starts from zero,
    which is why the server keeps its own per-IP and per-account limits.
    """

    def __init__(
        self,
        max_attempts: int = MAX_FAILED_ATTEMPTS,
        lockout_seconds: float = LOCKOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._clock = clock
        self.attempts = 0
        self.locked_until: float | None = None

    def _expire_lockout(self) -> None:
        # attempts survive expiry; only a successful login clears them.
        if self.locked_until is not None and self._clock() >= self.locked_until:
            self.locked_until = None

    def is_locked(self) -> bool:
        self._expire_lockout()
        return self.locked_until is not None

    def remaining_seconds(self) -> int:
        """Whole seconds left in the lockout, rounded up; 0 when not locked."""
        if not self.is_locked():
            return 0
        return math.ceil(self.locked_until - self._clock())

    def record_failure(self) -> None:
        self._expire_lockout()
        self.attempts += 1
        if self.attempts >= self.max_attempts:
            self.locked_until = self._clock() + self.lockout_seconds

    def record_success(self) -> None:
        self.attempts = 0
        self.locked_until = None
