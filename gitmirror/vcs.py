"""
VCS Executor — Run git subcommands for the mirror loop.

Every invocation captures combined stdout/stderr and the exit status.
Nothing here raises on a failed command: callers inspect the returned
CommandResult and decide how to report it.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single git invocation."""

    args: Sequence[str]
    returncode: int
    output: str = ""
    exception: Optional[str] = None  # set when the command could not run at all

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def error(self) -> Optional[str]:
        """Short description of the failure, None on success."""
        if self.ok:
            return None
        if self.exception:
            return self.exception
        return f"exit status {self.returncode}"


class GitExecutor:
    """
    Thin wrapper around the git binary.

    All subcommands go through run() and share one optional timeout, so
    clone, pull and push are bounded the same way.
    """

    def __init__(self, binary: str = "git", timeout: Optional[float] = None):
        self.binary = binary
        self.timeout = timeout

    def run(self, *args: str, cwd: Optional[PathLike] = None) -> CommandResult:
        """Run a git subcommand and capture its combined output."""
        cmd = [self.binary] + list(args)
        # Only the subcommand: the remaining arguments may carry credentials
        logger.debug(f"[git] {args[0] if args else ''} (cwd={cwd or '.'})")

        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            output = e.output or ""
            if isinstance(output, bytes):
                output = output.decode("utf-8", "replace")
            return CommandResult(
                args=cmd,
                returncode=-1,
                output=output,
                exception=f"timed out after {self.timeout}s",
            )
        except OSError as e:
            return CommandResult(args=cmd, returncode=-1, exception=str(e))

        return CommandResult(args=cmd, returncode=result.returncode, output=result.stdout or "")

    # ── Mirror operations ───────────────────────────────────────

    def clone(self, source: str, directory: PathLike) -> CommandResult:
        return self.run("clone", source, str(directory))

    def add_remote(self, directory: PathLike, name: str, url: str) -> CommandResult:
        return self.run("remote", "add", name, url, cwd=directory)

    def pull(self, directory: PathLike) -> CommandResult:
        return self.run("pull", cwd=directory)

    def push_all(self, directory: PathLike, remote: str) -> CommandResult:
        return self.run("push", "--all", remote, cwd=directory)

    def push_tags(self, directory: PathLike, remote: str) -> CommandResult:
        return self.run("push", "--tags", remote, cwd=directory)

    def read_revision(self, directory: PathLike, branch: str) -> CommandResult:
        """
        Read the commit id the local branch points at.

        On success the output is the stripped commit id.
        """
        result = self.run("rev-parse", "--verify", f"refs/heads/{branch}", cwd=directory)
        if result.ok:
            return CommandResult(args=result.args, returncode=0, output=result.output.strip())
        return result
