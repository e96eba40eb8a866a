# core/utils/rate_limit.py

import threading
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict


class RateLimiter:
    def __init__(self,
                 max_requests: int = 10,
                 window_seconds: float = 900.0,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize a per-key sliding-window limiter.

        Args:
            max_requests: Requests allowed per key inside one window
            window_seconds: Length of the sliding window in seconds
            clock: Monotonic time source, replaceable in tests
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        # Drop keys with no hits left inside the window, at most once per window
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self._hits):
            self._prune(self._hits[key], now)
            if not self._hits[key]:
                del self._hits[key]

    def allow(self, key: str) -> bool:
        """Record a request for ``key`` and report whether it is within the limit"""
        now = self.clock()
        with self._lock:
            self._sweep(now)
            hits = self._hits[key]
            self._prune(hits, now)
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest hit for ``key`` leaves the window"""
        now = self.clock()
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return 0
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
                return 0
            if len(hits) < self.max_requests:
                return 0
            return max(1, int(self.window_seconds - (now - hits[0]) + 0.999))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
