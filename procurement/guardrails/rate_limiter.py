import logging
import time
from collections import deque
from typing import Callable, Deque, Dict

from fastapi import Request

from procurement.errors import RateLimitError

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    In-process limiter: at most ``max_attempts`` hits per key within the
    trailing ``window_seconds``. State is per worker process.
    """

    def __init__(self, max_attempts: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> bool:
        """Record an attempt for ``key``; False if it exceeds the limit."""
        now = self.clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        hits = self._hits.get(key)
        if hits is not None:
            self._expire(hits, now)
            if len(hits) >= self.max_attempts:
                return False
        else:
            hits = self._hits[key] = deque()
        hits.append(now)
        return True

    def retry_after(self, key: str) -> int:
        hits = self._hits.get(key)
        if not hits:
            return 0
        return max(0, int(hits[0] + self.window_seconds - self.clock()) + 1)

    def reset(self):
        self._hits.clear()

    def _expire(self, hits: Deque[float], now: float):
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float):
        # only addresses seen within the window keep an entry
        for key in list(self._hits):
            self._expire(self._hits[key], now)
            if not self._hits[key]:
                del self._hits[key]
        self._last_sweep = now


async def limit_login_attempts(request: Request):
    """Dependency guarding the login route, keyed by client address."""
    limiter: SlidingWindowRateLimiter = request.app.state.login_limiter
    key = request.client.host if request.client else "unknown"
    if not limiter.hit(key):
        logger.warning(f"Login rate limit exceeded for {key}")
        minutes = max(1, round(limiter.window_seconds / 60))
        raise RateLimitError(
            f"Too many login attempts from this IP, please try again after {minutes} minutes",
            headers={"Retry-After": str(limiter.retry_after(key))},
        )
