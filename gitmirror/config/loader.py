"""
Config Loader — Build mirror settings from environment variables.

Job definitions come from one of three places, in order of precedence:

1. REPOS: JSON array of jobs (may itself be "metadata:<attribute>")
2. REPOS_FILE: path to a JSON or YAML file holding the same array
3. FROM_REPO + TO_REPO: legacy single pair, mirrored as job "default"

## Usage

    export REPOS='[{"ID": "docs", "From": "https://a/docs.git", "To": "metadata:docs-dest"}]'

    settings = MirrorSettings.from_env()
    for job in settings.jobs:
        ...

Every problem found here raises ConfigurationError. Nothing is mirrored
until all jobs are valid and resolved.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

import pydantic
import yaml

from ..errors import ConfigurationError, ValidationError
from .metadata import MetadataResolver
from .models import JobSpec

logger = logging.getLogger(__name__)

LEGACY_JOB_ID = "default"


def parse_job_specs(data: Any) -> List[JobSpec]:
    """Validate a decoded list of job descriptors."""
    if not isinstance(data, list):
        raise ConfigurationError("Job configuration must be a list of jobs")

    specs: List[JobSpec] = []
    seen = set()
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValidationError("job must be an object", field=f"jobs[{index}]")
        try:
            spec = JobSpec(**item)
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            loc = ".".join(str(p) for p in first.get("loc", ())) or "job"
            raise ValidationError(
                first.get("msg", "invalid job"),
                field=f"jobs[{index}].{loc}",
                details={"errors": len(e.errors())},
            ) from e
        if spec.id in seen:
            raise ValidationError(f"duplicate job ID {spec.id!r}", field=f"jobs[{index}].ID")
        seen.add(spec.id)
        specs.append(spec)

    if not specs:
        raise ConfigurationError("No jobs configured")

    return specs


def _load_repos_file(path: Path) -> Any:
    if not path.exists():
        raise ConfigurationError(f"REPOS_FILE does not exist: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not parse {path}: {e}") from e


def load_job_specs(environ: Mapping[str, str], resolver: MetadataResolver) -> List[JobSpec]:
    """Read unresolved job definitions from the environment."""
    repos = environ.get("REPOS", "")
    repos_file = environ.get("REPOS_FILE", "")
    from_repo = environ.get("FROM_REPO", "")
    to_repo = environ.get("TO_REPO", "")

    if repos:
        repos = resolver.resolve(repos)
        try:
            data = json.loads(repos)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Could not parse REPOS: {e}") from e
        return parse_job_specs(data)

    if repos_file:
        return parse_job_specs(_load_repos_file(Path(repos_file)))

    if from_repo and to_repo:
        return parse_job_specs([{"ID": LEGACY_JOB_ID, "From": from_repo, "To": to_repo}])

    raise ConfigurationError("REPOS environment variable must be set.")


def resolve_jobs(specs: List[JobSpec], resolver: MetadataResolver) -> List[JobSpec]:
    """Replace metadata references in job endpoints with their values."""
    resolved = []
    for spec in specs:
        from_ = resolver.resolve(spec.from_)
        to = resolver.resolve(spec.to)
        if not from_.strip() or not to.strip():
            raise ValidationError("resolved to an empty endpoint", field=f"job {spec.id!r}")
        resolved.append(spec.model_copy(update={"from_": from_, "to": to}))
    return resolved


def _float_env(environ: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative")
    return value


@dataclass
class MirrorSettings:
    """Process-wide settings for the mirror daemon."""

    jobs: List[JobSpec] = field(default_factory=list)
    work_dir: Path = Path(".")
    branch: str = "master"
    remote_name: str = "to"

    # Seconds
    sync_interval: float = 120.0
    clone_retry_delay: float = 10.0
    remote_retry_delay: float = 1.0
    stale_after: float = 15 * 60.0
    git_timeout: Optional[float] = None

    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        resolver: Optional[MetadataResolver] = None,
    ) -> "MirrorSettings":
        """Parse and resolve all settings. Raises ConfigurationError."""
        env = os.environ if environ is None else environ
        resolver = resolver or MetadataResolver()

        specs = load_job_specs(env, resolver)
        jobs = resolve_jobs(specs, resolver)

        port_raw = env.get("PORT", "8080").strip() or "8080"
        try:
            port = int(port_raw)
        except ValueError:
            raise ConfigurationError(f"PORT must be an integer, got {port_raw!r}")

        settings = cls(
            jobs=jobs,
            work_dir=Path(env.get("MIRROR_WORK_DIR", "") or "."),
            branch=env.get("MIRROR_BRANCH", "") or "master",
            remote_name=env.get("MIRROR_REMOTE_NAME", "") or "to",
            sync_interval=_float_env(env, "MIRROR_SYNC_INTERVAL", 120.0),
            clone_retry_delay=_float_env(env, "MIRROR_CLONE_RETRY_DELAY", 10.0),
            remote_retry_delay=_float_env(env, "MIRROR_REMOTE_RETRY_DELAY", 1.0),
            stale_after=_float_env(env, "MIRROR_STALE_AFTER", 15 * 60.0),
            git_timeout=_float_env(env, "MIRROR_GIT_TIMEOUT", None),
            host=env.get("HOST", "") or "0.0.0.0",
            port=port,
        )

        logger.info(f"Loaded {len(jobs)} mirror job(s): {', '.join(j.id for j in jobs)}")
        return settings
