"""
Retry — Unlimited fixed-delay retry for mirror phases.

The clone and remote setup phases never give up: they keep trying with a
fixed pause until they succeed or the process exits. Waiting is delegated
to a Waiter so tests can run the policy without sleeping.

## Usage

    from gitmirror.reliability.retry import EventWaiter, FixedDelayRetry

    stop = threading.Event()
    retry = FixedDelayRetry(delay=10, waiter=EventWaiter(stop))
    result = retry.run(lambda: try_clone())
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Waiter(Protocol):
    """Pause between attempts. Returns True when the caller should stop."""

    def wait(self, seconds: float) -> bool:
        ...


class EventWaiter:
    """Waiter backed by a threading.Event, used by the running daemon."""

    def __init__(self, stop_event: Optional[threading.Event] = None):
        self.stop_event = stop_event or threading.Event()

    def wait(self, seconds: float) -> bool:
        if seconds <= 0:
            return self.stop_event.is_set()
        return self.stop_event.wait(timeout=seconds)


class FixedDelayRetry:
    """
    Retry an attempt forever with a fixed delay between tries.

    attempt() returns a truthy value on success. run() returns that value,
    or None if the waiter signalled stop before a success.
    """

    def __init__(self, delay: float, waiter: Waiter):
        self.delay = delay
        self.waiter = waiter
        self.attempts = 0

    def run(self, attempt: Callable[[], Optional[T]]) -> Optional[T]:
        while True:
            self.attempts += 1
            result = attempt()
            if result:
                return result
            logger.debug(f"Attempt {self.attempts} failed, retrying in {self.delay}s")
            if self.waiter.wait(self.delay):
                return None
