"""
Health Check — Aggregate mirror job health for the status endpoint.

A job is unhealthy when its last operation failed, and stale when it has
not published a status within the staleness window (a pull or push that
hangs shows up this way). Any unhealthy or stale job turns the whole
response into a 500, but every job is still listed.

## Usage

    from gitmirror.observability.health import HealthChecker

    checker = HealthChecker(registry)
    health = checker.check()

    if not health.healthy:
        print(health.render_text())
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List

if TYPE_CHECKING:
    from ..mirror.job import Job

DEFAULT_STALE_AFTER = timedelta(minutes=15)


@dataclass(frozen=True)
class JobHealth:
    """Health of a single mirror job at check time."""

    id: str
    ok: bool
    message: str
    status_time: datetime
    stale: bool

    @property
    def healthy(self) -> bool:
        return self.ok and not self.stale


@dataclass(frozen=True)
class SystemHealth:
    """Overall health across all jobs, in declaration order."""

    checked_at: datetime
    jobs: List[JobHealth]

    @property
    def healthy(self) -> bool:
        return all(job.healthy for job in self.jobs)

    @property
    def http_status(self) -> int:
        return 200 if self.healthy else 500

    def render_text(self) -> str:
        lines = []
        for job in self.jobs:
            if job.stale:
                lines.append(f'Repo "{job.id}" possibly not fresh')
        for job in self.jobs:
            lines.append(f"---- repo {job.id} ----")
            lines.append(f"OK {job.ok}")
            lines.append(job.status_time.isoformat())
            lines.append(job.message)
        return "\n".join(lines) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "healthy": self.healthy,
            "checked_at": self.checked_at.isoformat().replace("+00:00", "Z"),
            "jobs": [
                {
                    "id": job.id,
                    "ok": job.ok,
                    "stale": job.stale,
                    "status_time": job.status_time.isoformat().replace("+00:00", "Z"),
                    "message": job.message,
                }
                for job in self.jobs
            ],
        }


class HealthChecker:
    """Evaluates every job in a registry on each check."""

    def __init__(
        self,
        jobs: Iterable["Job"],
        stale_after: timedelta = DEFAULT_STALE_AFTER,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.jobs = jobs
        self.stale_after = stale_after
        self._now = now

    def check(self) -> SystemHealth:
        now = self._now()
        results = []
        for job in self.jobs:
            status = job.status()
            results.append(
                JobHealth(
                    id=job.id,
                    ok=status.ok,
                    message=status.message,
                    status_time=status.time,
                    stale=now - status.time > self.stale_after,
                )
            )
        return SystemHealth(checked_at=now, jobs=results)
