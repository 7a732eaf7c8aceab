# api/services/rate_limiter.py
"""
Per-origin request limiter over a sliding time window.

Each origin (client address) may make at most `max_requests` requests in
any `window_seconds` span. Pruning, counting and recording happen under
one lock, so concurrent requests from the same origin cannot undercount.
Origins with nothing left in the window are swept out at most once per
window, so the table stays proportional to recently active clients.
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from utils.errors import RateLimited

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def _sweep(self, now: float, cutoff: float) -> None:
        """Drop origins with no requests left in the window. Caller holds the lock."""
        if now - self._last_sweep < self.window_seconds:
            return
        stale = [origin for origin, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for origin in stale:
            del self._hits[origin]
        self._last_sweep = now

    def check(self, origin: str) -> int:
        """
        Record a request from `origin`.

        Returns:
            Requests remaining in the current window

        Raises:
            RateLimited: The origin has used its budget for this window
        """
        now = self._clock()
        cutoff = now - self.window_seconds

        with self._lock:
            self._sweep(now, cutoff)
            hits = self._hits.setdefault(origin, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= self.max_requests:
                retry_after = max(0, int(hits[0] + self.window_seconds - now) + 1)
                logger.info(f"Rate limit hit for {origin}")
                raise RateLimited(
                    f"Too many requests. Try again in {retry_after} seconds."
                )

            hits.append(now)
            return self.max_requests - len(hits)

    def __len__(self) -> int:
        """Number of origins currently tracked."""
        with self._lock:
            return len(self._hits)

    def reset(self, origin: str = None) -> None:
        with self._lock:
            if origin is None:
                self._hits.clear()
            else:
                self._hits.pop(origin, None)
