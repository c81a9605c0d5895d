"""
git-mirror — CLI Entry Point

Usage:
    gitmirror serve [--host H] [--port N] [--work-dir DIR]
    gitmirror check-config [--json]

Configuration is read from the environment (see gitmirror.config.loader).
A .env file in the current directory is loaded first.
"""

from __future__ import annotations

# Load .env FIRST, before anything reads environment variables
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import json
from datetime import timedelta
from typing import Optional

import click

from .config.loader import MirrorSettings
from .errors import ConfigurationError
from .logging_config import setup_logging


def _load_settings() -> MirrorSettings:
    try:
        return MirrorSettings.from_env()
    except ConfigurationError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        raise SystemExit(1)


@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_format: Optional[str]) -> None:
    """git-mirror — keep destination repositories in sync with their sources."""
    ctx.ensure_object(dict)
    setup_logging(level=log_level, format_type=log_format)


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port (default: PORT or 8080)")
@click.option("--work-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory holding the repo-<ID> clones")
def serve(host: Optional[str], port: Optional[int], work_dir: Optional[Path]) -> None:
    """Start every mirror loop and serve the status endpoint."""
    from .mirror.registry import JobRegistry
    from .server import create_app, run_server

    settings = _load_settings()
    if work_dir is not None:
        settings.work_dir = work_dir

    registry = JobRegistry.from_settings(settings)
    registry.start()

    app = create_app(registry, stale_after=timedelta(seconds=settings.stale_after))
    run_server(app, host=host or settings.host, port=port or settings.port)


@cli.command("check-config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check_config(as_json: bool) -> None:
    """Validate and resolve the job configuration without mirroring."""
    settings = _load_settings()

    if as_json:
        click.echo(json.dumps({
            "jobs": [job.to_public_dict() for job in settings.jobs],
            "work_dir": str(settings.work_dir),
            "branch": settings.branch,
            "sync_interval": settings.sync_interval,
            "stale_after": settings.stale_after,
        }, indent=2))
        return

    click.secho(f"✓ {len(settings.jobs)} job(s) configured", fg="green")
    for job in settings.jobs:
        click.echo(f"  {job.id:20} → {settings.work_dir / ('repo-' + job.id)}")
    click.echo()
    click.echo(f"  Branch:         {settings.branch}")
    click.echo(f"  Sync interval:  {settings.sync_interval:.0f}s")
    click.echo(f"  Stale after:    {settings.stale_after:.0f}s")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
