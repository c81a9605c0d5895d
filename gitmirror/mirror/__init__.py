"""
Mirror Module — Per-job clone/pull/push loops and their status.
"""

from .job import Job, SyncOutcome
from .registry import JobRegistry
from .status import JobStatus, StatusDetail, redact

__all__ = [
    "Job",
    "JobRegistry",
    "JobStatus",
    "StatusDetail",
    "SyncOutcome",
    "redact",
]
