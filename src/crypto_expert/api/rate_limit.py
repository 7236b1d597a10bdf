"""Per-client sliding window rate limiting."""

import logging
import threading
import time
from collections import deque
from collections.abc import Callable

from fastapi import Request

from crypto_expert.errors import CryptoExpertError

logger = logging.getLogger(__name__)


class RateLimitExceeded(CryptoExpertError):
    """The client sent more requests than the window allows."""

    kind = "rate_limited"
    status_code = 429

    def __init__(self, message: str, retry_after: float) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per ``window_seconds`` for each client key.

    Requests over the limit are rejected immediately, never queued.

    Args:
        max_requests: Requests allowed per window (default: 2)
        window_seconds: Window length in seconds (default: 60)
        message: Message returned with rejections
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        max_requests: int = 2,
        window_seconds: float = 60.0,
        message: str = "Too many requests, please try again later.",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got: {max_requests}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got: {window_seconds}")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def check(self, key: str) -> None:
        """Record a request for ``key`` or raise RateLimitExceeded."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()

            if len(hits) >= self.max_requests:
                retry_after = self.window_seconds - (now - hits[0])
                logger.warning("Rate limit exceeded for %s", key)
                raise RateLimitExceeded(self.message, retry_after=retry_after)

            hits.append(now)

    def _sweep(self, now: float) -> None:
        # Drop clients whose newest hit has left the window
        stale = [key for key, hits in self._hits.items() if not hits or now - hits[-1] >= self.window_seconds]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    def __len__(self) -> int:
        """Number of clients currently tracked."""
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


def client_key(request: Request) -> str:
    """Rate limit key: the client's address."""
    return request.client.host if request.client else "unknown"
