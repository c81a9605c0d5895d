"""
Logging Configuration — One stderr handler for the mirror daemon.

Every job thread logs through the root logger. Records emitted by a job
carry ``job_id`` (and ``phase`` for status transitions) so interleaved
output from several mirror loops can be told apart. Endpoints are
redacted before a record is created; formatters never see them.

LOG_LEVEL and LOG_FORMAT (``json`` or ``text``) apply when the CLI does
not pass explicit values.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

JOB_FIELDS = ("job_id", "phase")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for name in JOB_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry)


class HumanFormatter(logging.Formatter):
    """
    Terminal format, tagged with the job when there is one:

        12:34:56 WARNING [job:docs      ] FAIL: Pull
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:7}"
        if sys.stderr.isatty():
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        job_id = getattr(record, "job_id", None)
        source = f"job:{job_id}" if job_id is not None else record.name.rsplit(".", 1)[-1]

        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"

        return f"{datetime.now():%H:%M:%S} {level} [{source[:15]:15}] {msg}"


def setup_logging(level: str | None = None, format_type: str | None = None) -> None:
    """Install the stderr handler on the root logger, replacing any others."""
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_format = (format_type or os.environ.get("LOG_FORMAT", "text")).lower()
    numeric_level = getattr(logging, log_level, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if log_format == "json" else HumanFormatter())
    handler.setLevel(numeric_level)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    # metadata lookups and the status endpoint's request log
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured: level={log_level}, format={log_format}")
