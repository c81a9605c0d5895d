"""
Rate Limiter — Token bucket gating the steady-state sync loop.

The bucket starts full, so the first call to wait() is admitted at once.
With burst=1 and interval=120 the loop runs at most once every two
minutes, no matter how quickly an iteration finishes or fails.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from .retry import EventWaiter, Waiter


class RateLimiter:
    """Token bucket with a refill of one token per interval."""

    def __init__(
        self,
        interval: float,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
        waiter: Optional[Waiter] = None,
    ):
        if interval < 0:
            raise ValueError("interval must not be negative")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self.interval = interval
        self.burst = burst
        self._clock = clock
        self._waiter = waiter or EventWaiter()
        self._tokens = float(burst)
        self._last = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last)
        self._last = now
        if self.interval == 0:
            self._tokens = float(self.burst)
            return
        self._tokens = min(float(self.burst), self._tokens + elapsed / self.interval)

    def try_acquire(self) -> bool:
        """Take a token if one is available, without blocking."""
        self._refill()
        if self._tokens >= 1:
            self._tokens -= 1
            return True
        return False

    def delay(self) -> float:
        """Seconds until the next token becomes available."""
        self._refill()
        if self._tokens >= 1:
            return 0.0
        return (1 - self._tokens) * self.interval

    def wait(self) -> bool:
        """
        Block until a token is available and consume it.

        Returns False if the waiter signalled stop while blocked.
        """
        while not self.try_acquire():
            if self._waiter.wait(self.delay()):
                return False
        return True
