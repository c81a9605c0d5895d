"""
Shared fixtures for mirror tests.

Provides a scripted stand-in for the git executor, a fake clock and a
waiter that records requested delays instead of sleeping. No real git
repositories or network access are needed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from gitmirror.mirror.job import Job
from gitmirror.observability.metrics import MetricsRegistry
from gitmirror.vcs import CommandResult


def ok(output: str = "") -> CommandResult:
    return CommandResult(args=["git"], returncode=0, output=output)


def fail(output: str = "", returncode: int = 1) -> CommandResult:
    return CommandResult(args=["git"], returncode=returncode, output=output)


class FakeGit:
    """
    Scripted git executor.

    Each operation pops results from its script; the last result sticks.
    Unscripted operations succeed (read_revision returns "abc123").
    """

    def __init__(self, **scripts: List[CommandResult]):
        self.scripts: Dict[str, List[CommandResult]] = {
            op: list(results) for op, results in scripts.items()
        }
        self.calls: List[tuple] = []

    def _next(self, op: str, *args) -> CommandResult:
        self.calls.append((op,) + args)
        queue = self.scripts.get(op)
        if queue:
            return queue.pop(0) if len(queue) > 1 else queue[0]
        return ok("abc123") if op == "read_revision" else ok()

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)

    def ops(self) -> List[str]:
        return [call[0] for call in self.calls]

    def clone(self, source, directory):
        return self._next("clone", source, directory)

    def add_remote(self, directory, name, url):
        return self._next("add_remote", directory, name, url)

    def pull(self, directory):
        return self._next("pull", directory)

    def push_all(self, directory, remote):
        return self._next("push_all", directory, remote)

    def push_tags(self, directory, remote):
        return self._next("push_tags", directory, remote)

    def read_revision(self, directory, branch):
        return self._next("read_revision", directory, branch)


class FakeClock:
    """Monotonic seconds plus a matching UTC wall clock."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.start = start
        self.seconds = 0.0

    def monotonic(self) -> float:
        return self.seconds

    def now(self) -> datetime:
        return self.start + timedelta(seconds=self.seconds)

    def advance(self, seconds: float) -> None:
        self.seconds += seconds


class RecordingWaiter:
    """
    Waiter that records delays and advances the fake clock.

    Signals stop once max_waits delays have been requested. on_wait is
    called before each delay is recorded, for inspecting state mid-retry.
    """

    def __init__(
        self,
        clock: Optional[FakeClock] = None,
        max_waits: Optional[int] = None,
        on_wait: Optional[Callable[[float], None]] = None,
    ):
        self.clock = clock
        self.max_waits = max_waits
        self.on_wait = on_wait
        self.delays: List[float] = []

    def wait(self, seconds: float) -> bool:
        if self.on_wait is not None:
            self.on_wait(seconds)
        self.delays.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)
        return self.max_waits is not None and len(self.delays) >= self.max_waits


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    return MetricsRegistry(prefix="test")


@pytest.fixture
def make_job(tmp_path: Path, clock: FakeClock, metrics_registry: MetricsRegistry):
    """Factory for jobs wired to fakes."""

    def _make(
        git: Optional[FakeGit] = None,
        waiter: Optional[RecordingWaiter] = None,
        id: str = "a",
        from_: str = "repo-x",
        to: str = "repo-y",
        **kwargs,
    ) -> Job:
        return Job(
            id=id,
            from_=from_,
            to=to,
            work_dir=tmp_path,
            executor=git or FakeGit(),
            waiter=waiter or RecordingWaiter(clock=clock),
            now=clock.now,
            monotonic=clock.monotonic,
            metrics=metrics_registry,
            **kwargs,
        )

    return _make
