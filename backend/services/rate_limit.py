"""Fixed-window request counter per client. No Redis needed.

Note: Each uvicorn worker has its own counter. With --workers 2 a client
effectively gets twice the ceiling. Acceptable at this scale.
"""

import math
import time
from typing import Callable


class FixedWindowLimiter:
    def __init__(self, max_requests: int = 60, window_seconds: int = 60, clock: Callable[[], float] = time.time):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._store: dict[str, tuple[float, int]] = {}
        self._next_sweep = clock() + window_seconds

    def hit(self, key: str) -> tuple[bool, int]:
        """Count one request for key. Returns (allowed, seconds until the window resets)."""
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)
        elif key in self._store and now >= self._store[key][0]:
            del self._store[key]

        resets_at, count = self._store.get(key, (now + self.window_seconds, 0))
        count += 1
        self._store[key] = (resets_at, count)
        retry_after = max(1, math.ceil(resets_at - now))
        return count <= self.max_requests, retry_after

    def _sweep(self, now: float) -> None:
        """Drop every expired window. Runs at most once per window length."""
        expired = [key for key, (resets_at, _) in self._store.items() if now >= resets_at]
        for key in expired:
            del self._store[key]
        self._next_sweep = now + self.window_seconds

    def __len__(self) -> int:
        return len(self._store)

    def reset(self) -> None:
        self._store.clear()
