"""Fixed-window request limiter for admin endpoints.

One instance is built per process in the FastAPI lifespan and stored on
``app.state``; it is never a module global. Thread-safe because sync
route handlers run in a thread pool.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

# Entries are pruned once the table grows past this size
_PRUNE_THRESHOLD = 1000


@dataclass
class _Window:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one check."""

    allowed: bool
    remaining: int
    reset_at: float


class RateLimiter:
    """Allow ``max_requests`` per ``window_seconds`` per identifier."""

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str) -> RateLimitDecision:
        """Count one request for ``identifier`` and decide whether to allow it."""
        with self._lock:
            now = self._clock()
            window = self._windows.get(identifier)

            if window is None or now > window.reset_at:
                window = _Window(count=1, reset_at=now + self._window_seconds)
                self._windows[identifier] = window
                if len(self._windows) > _PRUNE_THRESHOLD:
                    self._prune(now)
                return RateLimitDecision(True, self._max_requests - 1, window.reset_at)

            if window.count >= self._max_requests:
                return RateLimitDecision(False, 0, window.reset_at)

            window.count += 1
            return RateLimitDecision(
                True, self._max_requests - window.count, window.reset_at
            )

    def retry_after(self, decision: RateLimitDecision) -> int:
        """Whole seconds until the window resets (at least 1)."""
        return max(1, int(decision.reset_at - self._clock() + 0.999))

    def reset(self) -> None:
        """Forget all windows."""
        with self._lock:
            self._windows.clear()

    def _prune(self, now: float) -> None:
        expired = [key for key, w in self._windows.items() if now > w.reset_at]
        for key in expired:
            del self._windows[key]
