"""
Job Registry — The fixed set of jobs for this process.

Built once at startup and handed to both the mirror threads and the HTTP
status surface. Jobs are never added or removed afterwards.

## Usage

    registry = JobRegistry.from_settings(settings)
    registry.start()           # one daemon thread per job
    app = create_app(registry)
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Iterator, List, Optional, Tuple

from ..config.loader import MirrorSettings
from ..config.models import JobSpec
from ..errors import ConfigurationError
from ..reliability import EventWaiter
from ..vcs import GitExecutor
from .job import Job

logger = logging.getLogger(__name__)


class JobRegistry:
    """Ordered, immutable collection of jobs."""

    def __init__(self, jobs: Iterable[Job], stop_event: Optional[threading.Event] = None):
        self._jobs: Tuple[Job, ...] = tuple(jobs)
        ids = [job.id for job in self._jobs]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate job ID(s): {', '.join(duplicates)}")

        self._stop = stop_event or threading.Event()
        self._threads: List[threading.Thread] = []
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: MirrorSettings,
        executor: Optional[GitExecutor] = None,
    ) -> "JobRegistry":
        return cls.from_specs(settings.jobs, settings, executor)

    @classmethod
    def from_specs(
        cls,
        specs: Iterable[JobSpec],
        settings: MirrorSettings,
        executor: Optional[GitExecutor] = None,
    ) -> "JobRegistry":
        """Create one Job per resolved spec, all sharing a stop event."""
        stop = threading.Event()
        waiter = EventWaiter(stop)
        executor = executor or GitExecutor(timeout=settings.git_timeout)

        jobs = [
            Job(
                id=spec.id,
                from_=spec.from_,
                to=spec.to,
                work_dir=settings.work_dir,
                branch=settings.branch,
                remote_name=settings.remote_name,
                sync_interval=settings.sync_interval,
                clone_retry_delay=settings.clone_retry_delay,
                remote_retry_delay=settings.remote_retry_delay,
                executor=executor,
                waiter=waiter,
            )
            for spec in specs
        ]
        return cls(jobs, stop_event=stop)

    def __iter__(self) -> Iterator[Job]:
        return iter(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)

    def get(self, job_id: str) -> Optional[Job]:
        for job in self._jobs:
            if job.id == job_id:
                return job
        return None

    @property
    def threads(self) -> List[threading.Thread]:
        return list(self._threads)

    def start(self) -> None:
        """Start exactly one mirror thread per job."""
        with self._lock:
            if self._threads:
                raise RuntimeError("Mirror loops already started")
            for job in self._jobs:
                thread = threading.Thread(
                    target=self._run_job,
                    args=(job,),
                    name=f"mirror-{job.id}",
                    daemon=True,
                )
                self._threads.append(thread)
                thread.start()
        logger.info(f"Started {len(self._threads)} mirror loop(s)")

    def _run_job(self, job: Job) -> None:
        try:
            job.run()
        except Exception as e:
            job.set_status(False, "Mirror loop crashed")
            logger.exception(f"Mirror loop for {job.id!r} crashed: {type(e).__name__}", extra={"job_id": job.id})
            raise

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask all loops to stop at their next wait. Not used by the daemon."""
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
