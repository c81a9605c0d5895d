"""
Mirror Job — One source → destination pair and its mirror loop.

Lifecycle:

    Cloning ──▶ RemoteSetup ──▶ Syncing (forever)
       ▲  │          ▲  │         pull → read HEAD → compare
       └──┘ 10s      └──┘ 1s        → push --all → push --tags → record HEAD

Clone and remote setup retry forever with a fixed delay. The sync loop is
gated by a token bucket (one iteration per interval) and a failed step
simply ends the iteration; the limiter paces the retry.

The HEAD baseline only moves after both pushes succeed, so a failed push is
retried on the next tick instead of being skipped.

Status fields are written only by set_status(), under the job lock. The
lock is never held while git runs.
"""

from __future__ import annotations

import logging
import shutil
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..observability.metrics import MetricsRegistry, metrics as default_metrics
from ..reliability import EventWaiter, FixedDelayRetry, RateLimiter, Waiter
from ..vcs import CommandResult, GitExecutor
from .status import JobStatus, StatusDetail, redact

logger = logging.getLogger(__name__)


class SyncOutcome(str, Enum):
    """Result of one pass through the sync loop."""
    PULL_FAILED = "pull_failed"
    HEAD_FAILED = "head_failed"
    UNCHANGED = "unchanged"
    PUSH_FAILED = "push_failed"
    PUSH_TAGS_FAILED = "push_tags_failed"
    PUSHED = "pushed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Job:
    """A mirrored repository pair with its status and mirror loop."""

    def __init__(
        self,
        id: str,
        from_: str,
        to: str,
        work_dir: Path = Path("."),
        branch: str = "master",
        remote_name: str = "to",
        sync_interval: float = 120.0,
        clone_retry_delay: float = 10.0,
        remote_retry_delay: float = 1.0,
        executor: Optional[GitExecutor] = None,
        waiter: Optional[Waiter] = None,
        now: Callable[[], datetime] = _utcnow,
        monotonic: Callable[[], float] = time.monotonic,
        metrics: Optional[MetricsRegistry] = None,
    ):
        if not id:
            raise ValueError("job ID must not be empty")
        if not from_ or not to:
            raise ValueError(f"empty from or to for job {id!r}")

        self._id = id
        self._from = from_
        self._to = to

        self.work_dir = Path(work_dir)
        self.branch = branch
        self.remote_name = remote_name
        self.sync_interval = sync_interval
        self.clone_retry_delay = clone_retry_delay
        self.remote_retry_delay = remote_retry_delay
        self.executor = executor or GitExecutor()
        self.waiter = waiter or EventWaiter()
        self._now = now
        self._monotonic = monotonic
        self._metrics = metrics or default_metrics
        self._labels = {"job": id}

        self._baseline: Optional[str] = None

        self._lock = threading.Lock()
        self._status_ok = True
        self._status_message = "Created"
        self._status_time = now()

    def __repr__(self) -> str:
        return f"Job(id={self._id!r})"

    @property
    def id(self) -> str:
        return self._id

    @property
    def from_(self) -> str:
        return self._from

    @property
    def to(self) -> str:
        return self._to

    @property
    def directory(self) -> Path:
        """Working directory holding this job's clone."""
        return self.work_dir / f"repo-{self._id}"

    @property
    def baseline(self) -> Optional[str]:
        """Revision last pushed successfully, None before the first push."""
        return self._baseline

    # ─── Status ─────────────────────────────────────────────

    def status(self) -> JobStatus:
        """Consistent snapshot of the status fields."""
        with self._lock:
            return JobStatus(
                ok=self._status_ok,
                message=self._status_message,
                time=self._status_time,
            )

    def set_status(self, ok: bool, message: str, detail: Optional[StatusDetail] = None) -> None:
        """Publish a status transition and log its redacted details."""
        with self._lock:
            self._status_ok = ok
            self._status_message = message
            self._status_time = max(self._now(), self._status_time)
            status_time = self._status_time

        self._metrics.set_gauge("job_ok", 1 if ok else 0, labels=self._labels)
        self._metrics.set_gauge(
            "job_status_timestamp_seconds", status_time.timestamp(), labels=self._labels
        )

        text = message
        if detail is not None:
            formatted = detail.format()
            if formatted:
                text = f"{message}\n{formatted}"
        text = redact(text, self._from, self._to)

        extra = {"job_id": self._id, "phase": message}
        if ok:
            logger.info(f"OK: {text}", extra=extra)
        else:
            logger.warning(f"FAIL: {text}", extra=extra)

    def _fail(self, message: str, result: CommandResult) -> None:
        self.set_status(False, message, StatusDetail(output=result.output, error=result.error))

    # ─── Mirror loop ────────────────────────────────────────

    def run(self) -> None:
        """Clone, add the destination remote, then sync until stopped."""
        if not self.clone():
            return
        if not self.setup_remote():
            return
        self.sync_forever()

    def clone(self) -> bool:
        """Clone the source, retrying forever. False only when stopped."""
        self.set_status(True, "Cloning")

        if self.directory.exists():
            logger.info("Removing leftover working directory", extra={"job_id": self._id})
            shutil.rmtree(self.directory, ignore_errors=True)

        retry = FixedDelayRetry(self.clone_retry_delay, self.waiter)
        return bool(retry.run(self._try_clone))

    def _try_clone(self) -> bool:
        self._metrics.increment("clone_total", labels=self._labels)
        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._metrics.increment("clone_failures_total", labels=self._labels)
            self.set_status(False, "Cloning", StatusDetail(error=f"work dir {self.work_dir}: {e}"))
            return False

        result = self.executor.clone(self._from, self.directory)
        if result.ok:
            self.set_status(True, "Cloned", StatusDetail(output=result.output))
            return True

        self._metrics.increment("clone_failures_total", labels=self._labels)
        self._fail("Cloning", result)
        shutil.rmtree(self.directory, ignore_errors=True)
        return False

    def setup_remote(self) -> bool:
        """Register the destination remote, retrying forever."""
        retry = FixedDelayRetry(self.remote_retry_delay, self.waiter)
        return bool(retry.run(self._try_add_remote))

    def _try_add_remote(self) -> bool:
        self.set_status(True, "Setting remote")
        result = self.executor.add_remote(self.directory, self.remote_name, self._to)
        if result.ok:
            self.set_status(True, "Added remote", StatusDetail(output=result.output))
            return True
        self._fail("Adding remote", result)
        return False

    def sync_forever(self) -> None:
        """Run sync iterations at most once per sync_interval."""
        limiter = RateLimiter(
            self.sync_interval,
            burst=1,
            clock=self._monotonic,
            waiter=self.waiter,
        )
        while limiter.wait():
            self.sync_once()

    def sync_once(self) -> SyncOutcome:
        """Pull from the source and push to the destination if HEAD moved."""
        extra = {"job_id": self._id}

        logger.debug("Pulling", extra=extra)
        self._metrics.increment("pull_total", labels=self._labels)
        result = self.executor.pull(self.directory)
        if not result.ok:
            self._metrics.increment("pull_failures_total", labels=self._labels)
            self._fail("Pull", result)
            return SyncOutcome.PULL_FAILED
        logger.debug(f"Pulled: {redact(result.output, self._from, self._to)}", extra=extra)

        head = self.executor.read_revision(self.directory, self.branch)
        if not head.ok or not head.output:
            self._fail("parse HEAD", head)
            return SyncOutcome.HEAD_FAILED
        revision = head.output

        if revision == self._baseline:
            self._metrics.increment("sync_unchanged_total", labels=self._labels)
            self.set_status(True, "Synced - nothing to push", StatusDetail(output=revision))
            return SyncOutcome.UNCHANGED

        logger.debug("Pushing", extra=extra)
        self._metrics.increment("push_total", labels=self._labels)
        result = self.executor.push_all(self.directory, self.remote_name)
        if not result.ok:
            self._metrics.increment("push_failures_total", labels=self._labels)
            self._fail("Push", result)
            return SyncOutcome.PUSH_FAILED

        logger.debug("Pushing tags", extra=extra)
        self._metrics.increment("push_total", labels=self._labels)
        result = self.executor.push_tags(self.directory, self.remote_name)
        if not result.ok:
            self._metrics.increment("push_failures_total", labels=self._labels)
            self._fail("Push tags", result)
            return SyncOutcome.PUSH_TAGS_FAILED

        self.set_status(True, "Synced - pushed", StatusDetail(output=result.output))
        self._baseline = revision
        return SyncOutcome.PUSHED
