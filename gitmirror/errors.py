"""
Errors — Exception types shared across the mirror daemon.

Configuration problems are fatal at startup. Failures of individual git
operations are never raised; they become failing job statuses instead.

## Usage

    from gitmirror.errors import ConfigurationError

    try:
        settings = MirrorSettings.from_env()
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""
    pass


class ValidationError(ConfigurationError):
    """Raised when a single job definition fails validation."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message
