"""
Config Module — Job definitions, settings and metadata resolution.
"""

from .loader import MirrorSettings, load_job_specs, parse_job_specs, resolve_jobs
from .metadata import METADATA_PREFIX, MetadataResolver
from .models import JobSpec

__all__ = [
    "JobSpec",
    "METADATA_PREFIX",
    "MetadataResolver",
    "MirrorSettings",
    "load_job_specs",
    "parse_job_specs",
    "resolve_jobs",
]
