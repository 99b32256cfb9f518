import threading
import time
from collections import OrderedDict, deque
from typing import Callable, Deque

from fastapi import HTTPException, Request, status


class SlidingWindowRateLimiter:
    """
    Per-key sliding-window counter with a fixed number of tracked keys.

    Keys not seen for the longest time are evicted once `max_keys` is exceeded,
    so memory stays bounded no matter how many clients show up.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        max_keys: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests <= 0 or window_seconds <= 0 or max_keys <= 0:
            raise ValueError("rate limiter limits must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._clock = clock
        self._hits: "OrderedDict[str, Deque[float]]" = OrderedDict()
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        """Record a request for `key`. Returns False when it is over the limit."""
        now = self._clock()
        cutoff = now - self.window_seconds
        with self._lock:
            hits = self._hits.get(key)
            if hits is None:
                hits = deque()
                self._hits[key] = hits
            self._hits.move_to_end(key)

            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= self.max_requests:
                return False
            hits.append(now)

            while len(self._hits) > self.max_keys:
                self._hits.popitem(last=False)
            return True

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def __len__(self) -> int:
        return len(self._hits)


def get_rate_limiter(state_attr: str):
    """Dependency factory returning the limiter stored at `app.state.<state_attr>`."""

    def _limiter(request: Request) -> SlidingWindowRateLimiter:
        return getattr(request.app.state, state_attr)

    return _limiter


def enforce_rate_limit(limiter: SlidingWindowRateLimiter, key: str) -> None:
    if not limiter.hit(key):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate_limit")
