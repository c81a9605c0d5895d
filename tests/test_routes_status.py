"""
Tests for the status HTTP surface (/status, /status.json, /metrics).
"""

from __future__ import annotations

from datetime import timedelta

import pytest

pytest.importorskip("flask")

from gitmirror.mirror.registry import JobRegistry
from gitmirror.observability.health import HealthChecker
from gitmirror.server import create_app


@pytest.fixture
def jobs(make_job):
    return [make_job(id="a"), make_job(id="b", from_="repo-b", to="mirror-b")]


@pytest.fixture
def app(jobs, clock, metrics_registry):
    registry = JobRegistry(jobs)
    checker = HealthChecker(registry, now=clock.now)
    app = create_app(registry, checker=checker, metrics=metrics_registry)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


class TestStatusText:

    def test_healthy(self, client):
        resp = client.get("/status")

        assert resp.status_code == 200
        assert resp.mimetype == "text/plain"
        body = resp.get_data(as_text=True)
        assert "---- repo a ----" in body
        assert "---- repo b ----" in body
        assert body.index("repo a") < body.index("repo b")

    def test_failing_job_returns_500(self, client, jobs):
        jobs[0].set_status(False, "Cloning")

        resp = client.get("/status")

        assert resp.status_code == 500
        body = resp.get_data(as_text=True)
        assert "OK False" in body
        assert "Cloning" in body
        # The healthy job is still listed
        assert "---- repo b ----" in body

    def test_stale_job_returns_500(self, client, clock, jobs):
        clock.advance(16 * 60)
        jobs[1].set_status(True, "Synced - nothing to push")

        resp = client.get("/status")

        assert resp.status_code == 500
        assert 'Repo "a" possibly not fresh' in resp.get_data(as_text=True)

    def test_recovers_after_success(self, client, jobs):
        jobs[0].set_status(False, "Pull")
        assert client.get("/status").status_code == 500

        jobs[0].set_status(True, "Synced - pushed")
        assert client.get("/status").status_code == 200

    def test_command_output_never_exposed(self, client, jobs):
        from gitmirror.mirror.status import StatusDetail

        jobs[0].set_status(False, "Push", StatusDetail(output="token ghp_secret", error="exit status 1"))
        body = client.get("/status").get_data(as_text=True)

        assert "ghp_secret" not in body
        assert "repo-x" not in body
        assert "repo-y" not in body

    def test_post_not_allowed(self, client):
        assert client.post("/status").status_code == 405


class TestStatusJson:

    def test_json_payload(self, client, jobs):
        jobs[1].set_status(False, "Push tags")

        resp = client.get("/status.json")

        assert resp.status_code == 500
        data = resp.get_json()
        assert data["healthy"] is False
        assert [j["id"] for j in data["jobs"]] == ["a", "b"]
        assert data["jobs"][1]["message"] == "Push tags"


class TestMetrics:

    def test_prometheus_output(self, client, jobs):
        jobs[0].set_status(True, "Cloned")

        resp = client.get("/metrics")

        assert resp.status_code == 200
        body = resp.get_data(as_text=True)
        assert "# TYPE test_job_ok gauge" in body
        assert 'test_job_ok{job="a"} 1' in body


def test_default_checker_uses_stale_after(jobs):
    app = create_app(JobRegistry(jobs), stale_after=timedelta(minutes=5))
    assert app.config["HEALTH_CHECKER"].stale_after == timedelta(minutes=5)
