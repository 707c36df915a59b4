"""Sliding-window admission control for order submission.

Each client identifier may submit ``limit`` requests per ``window_seconds``.
The limiter is process-local; running several workers multiplies the
effective limit by the worker count.
"""

import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from math import ceil

from fastapi import Request
from shared import settings


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0


class SlidingWindowRateLimiter:
    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def hit(self, key: str) -> RateDecision:
        """Record one request for ``key`` unless the window is already full."""
        now = self._clock()
        with self._lock:
            self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - self.window_seconds:
                hits.popleft()

            if len(hits) >= self.limit:
                wait = hits[0] + self.window_seconds - now
                retry_after = min(max(ceil(wait), 1), ceil(self.window_seconds))
                return RateDecision(allowed=False, remaining=0, retry_after=retry_after)

            hits.append(now)
            return RateDecision(allowed=True, remaining=self.limit - len(hits))

    def _sweep(self, now: float) -> None:
        """Forget keys whose newest hit left the window. Runs at most once per window."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        cutoff = now - self.window_seconds
        for key in [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


_current_limiter: SlidingWindowRateLimiter | None = None


def get_limiter() -> SlidingWindowRateLimiter:
    """Return the order limiter, built from settings on first use."""
    global _current_limiter
    if _current_limiter is None:
        _current_limiter = SlidingWindowRateLimiter(
            limit=settings.order_rate_limit(),
            window_seconds=settings.order_rate_window_seconds(),
        )
    return _current_limiter


def set_limiter(limiter: SlidingWindowRateLimiter) -> None:
    global _current_limiter
    _current_limiter = limiter


def reset_limiter() -> None:
    global _current_limiter
    _current_limiter = None


def client_identifier(request: Request) -> str:
    """Best guess at the caller's address behind proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()

    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"
