"""In-memory fixed-window rate limiter.

Each key gets a window that opens on its first hit and lasts one policy
period. A burst straddling two windows can be admitted up to twice the
limit; that is the accepted cost of fixed-window counting.

Counters live in process memory only, so a restart resets them.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable

from domain.model.rate_limit import RateLimitDecision, RateLimitPolicy

SWEEP_INTERVAL_SECONDS = 60.0


@dataclass
class _Window:
    started_at: float
    count: int


class FixedWindowRateLimiter:
    def __init__(self, policy: RateLimitPolicy, clock: Callable[[], float] = time.monotonic):
        self.policy = policy
        self._period = policy.period.total_seconds()
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + max(self._period, SWEEP_INTERVAL_SECONDS)

    def admit(self, key: str) -> RateLimitDecision:
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep(now)

            window = self._windows.get(key)
            if window is None or now - window.started_at >= self._period:
                window = _Window(started_at=now, count=0)
                self._windows[key] = window

            window.count += 1
            allowed = window.count <= self.policy.limit
            if not allowed:
                # Denied hits do not grow the counter past limit + 1
                window.count = self.policy.limit + 1

            return RateLimitDecision(
                allowed=allowed,
                limit=self.policy.limit,
                remaining=max(self.policy.limit - window.count, 0),
                reset_after=max(window.started_at + self._period - now, 0.0),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> None:
        expired = [
            key for key, window in self._windows.items()
            if now - window.started_at >= self._period
        ]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + max(self._period, SWEEP_INTERVAL_SECONDS)
