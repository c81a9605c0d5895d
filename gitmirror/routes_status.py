"""
Status API — Health surface over the mirror jobs.

Blueprint: status_bp
Routes:
    /status         (plain text, 200 when healthy, 500 otherwise)
    /status.json    (same evaluation as JSON)
    /metrics        (Prometheus text)

Only phase labels are exposed here. Command output stays in the log.
"""

from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify

status_bp = Blueprint("status", __name__)


def _checker():
    return current_app.config["HEALTH_CHECKER"]


@status_bp.route("/status", methods=["GET"])
def status_text():
    """Per-job status as plain text."""
    health = _checker().check()
    return Response(
        health.render_text(),
        status=health.http_status,
        mimetype="text/plain",
    )


@status_bp.route("/status.json", methods=["GET"])
def status_json():
    """Per-job status as JSON."""
    health = _checker().check()
    return jsonify(health.to_dict()), health.http_status


@status_bp.route("/metrics", methods=["GET"])
def metrics_text():
    """Mirror counters in Prometheus exposition format."""
    registry = current_app.config["METRICS"]
    return Response(registry.export_prometheus(), mimetype="text/plain")
