"""
Status Server — Flask app exposing mirror health.

The mirror loops run in background threads; this server only reads their
status. It is meant to sit behind a load balancer or uptime checker that
treats any non-200 as unhealthy.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Optional

from flask import Flask, request

from .mirror.registry import JobRegistry
from .observability.health import DEFAULT_STALE_AFTER, HealthChecker
from .observability.metrics import MetricsRegistry, metrics as default_metrics
from .routes_status import status_bp

logger = logging.getLogger(__name__)


def create_app(
    registry: JobRegistry,
    stale_after: timedelta = DEFAULT_STALE_AFTER,
    checker: Optional[HealthChecker] = None,
    metrics: Optional[MetricsRegistry] = None,
) -> Flask:
    """Create the Flask application for a job registry."""
    app = Flask(__name__)

    app.config["JOB_REGISTRY"] = registry
    app.config["HEALTH_CHECKER"] = checker or HealthChecker(registry, stale_after=stale_after)
    app.config["METRICS"] = metrics or default_metrics

    app.register_blueprint(status_bp)

    # ── Request Logging ───────────────────────────────────────────

    @app.before_request
    def log_request_start():
        request._start_time = time.time()

    @app.after_request
    def log_request_end(response):
        duration_ms = 0
        if hasattr(request, "_start_time"):
            duration_ms = int((time.time() - request._start_time) * 1000)
        logger.debug(f"{request.method} {request.path} → {response.status_code} ({duration_ms}ms)")
        return response

    return app


def run_server(app: Flask, host: str = "0.0.0.0", port: int = 8080) -> None:
    """Serve the status app. Blocks until the process exits."""
    logger.info(f"Status server listening on http://{host}:{port}/status")
    app.run(host=host, port=port, threaded=True, use_reloader=False)
