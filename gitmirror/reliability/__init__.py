"""
Reliability Module — Fixed-delay retries and rate limiting for mirror loops.
"""

from .rate_limiter import RateLimiter
from .retry import EventWaiter, FixedDelayRetry, Waiter

__all__ = [
    "EventWaiter",
    "FixedDelayRetry",
    "RateLimiter",
    "Waiter",
]
