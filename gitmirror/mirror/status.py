"""
Job Status — Status snapshots, structured details and redaction.

The public status is only a phase label ("Cloning", "Push", ...). Command
output and errors go to the log, after the job's endpoints have been
replaced with placeholders so tokens embedded in URLs never leak.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

REDACTED_FROM = "<REDACTED (FROM)>"
REDACTED_TO = "<REDACTED (TO)>"


@dataclass(frozen=True)
class JobStatus:
    """Point-in-time copy of a job's status fields."""

    ok: bool
    message: str
    time: datetime


@dataclass(frozen=True)
class StatusDetail:
    """Supplementary values attached to a status update."""

    output: Optional[Union[str, bytes]] = None
    error: Optional[Union[str, BaseException]] = None

    def format(self) -> str:
        lines = []
        if self.output:
            output = self.output
            if isinstance(output, bytes):
                output = output.decode("utf-8", "replace")
            lines.append(output.rstrip("\n"))
        if self.error:
            lines.append(str(self.error))
        return "\n".join(lines)


def redact(text: str, from_: str, to: str) -> str:
    """Replace every literal occurrence of the job endpoints."""
    if from_:
        text = text.replace(from_, REDACTED_FROM)
    if to:
        text = text.replace(to, REDACTED_TO)
    return text
