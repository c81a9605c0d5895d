"""
Metadata Resolver — Resolve "metadata:<attribute>" values.

A config value written as "metadata:github-token" is replaced with the
project attribute "github-token" from the GCE metadata server. Values
without the prefix pass through untouched. Any lookup failure is a
configuration error: the daemon must not start with a half-resolved job.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import requests

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

METADATA_PREFIX = "metadata:"
DEFAULT_METADATA_HOST = "metadata.google.internal"


class MetadataResolver:
    """Look up project attributes on the metadata server."""

    def __init__(
        self,
        host: Optional[str] = None,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.host = host or os.environ.get("GCE_METADATA_HOST") or DEFAULT_METADATA_HOST
        self.timeout = timeout
        self.session = session or requests.Session()

    def attribute_url(self, name: str) -> str:
        return f"http://{self.host}/computeMetadata/v1/project/attributes/{name}"

    def project_attribute(self, name: str) -> str:
        """Fetch a single project attribute value."""
        url = self.attribute_url(name)
        try:
            response = self.session.get(
                url,
                headers={"Metadata-Flavor": "Google"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ConfigurationError(
                f"Could not get project metadata value {METADATA_PREFIX + name!r}: {e}"
            ) from e

        logger.debug(f"Resolved project metadata attribute {name!r}")
        return response.text

    def resolve(self, value: str) -> str:
        """Return value, or the metadata attribute it points at."""
        if not value.startswith(METADATA_PREFIX):
            return value
        name = value[len(METADATA_PREFIX):]
        if not name:
            raise ConfigurationError(f"Empty metadata attribute name in {value!r}")
        return self.project_attribute(name)
