"""
Tests for gitmirror.mirror.registry — job collection and loop startup.
"""

import time

import pytest

from gitmirror.config import JobSpec, MirrorSettings
from gitmirror.errors import ConfigurationError
from gitmirror.mirror.registry import JobRegistry

from conftest import FakeGit


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestJobRegistry:

    def test_preserves_order(self, make_job):
        registry = JobRegistry([make_job(id="b"), make_job(id="a"), make_job(id="c")])

        assert [job.id for job in registry] == ["b", "a", "c"]
        assert len(registry) == 3

    def test_get(self, make_job):
        registry = JobRegistry([make_job(id="a")])

        assert registry.get("a").id == "a"
        assert registry.get("missing") is None

    def test_duplicate_ids_rejected(self, make_job):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            JobRegistry([make_job(id="a"), make_job(id="a")])

    def test_from_settings(self, tmp_path):
        settings = MirrorSettings(
            jobs=[JobSpec(id="a", from_="repo-x", to="repo-y")],
            work_dir=tmp_path,
            branch="main",
            sync_interval=30,
        )

        registry = JobRegistry.from_settings(settings, executor=FakeGit())
        job = registry.get("a")

        assert job.directory == tmp_path / "repo-a"
        assert job.branch == "main"
        assert job.sync_interval == 30
        assert job.from_ == "repo-x"
        assert job.to == "repo-y"


class TestStart:

    @pytest.fixture
    def registry(self, tmp_path):
        settings = MirrorSettings(
            jobs=[
                JobSpec(id="a", from_="repo-x", to="repo-y"),
                JobSpec(id="b", from_="repo-b", to="mirror-b"),
            ],
            work_dir=tmp_path,
        )
        registry = JobRegistry.from_settings(settings, executor=FakeGit())
        yield registry
        registry.stop(timeout=5)

    def test_one_thread_per_job(self, registry):
        registry.start()

        names = sorted(t.name for t in registry.threads)
        assert names == ["mirror-a", "mirror-b"]
        assert all(t.daemon for t in registry.threads)

    def test_loops_reach_sync(self, registry):
        registry.start()

        assert _wait_for(lambda: all(
            job.status().message == "Synced - pushed" for job in registry
        ))

    def test_start_twice_rejected(self, registry):
        registry.start()
        with pytest.raises(RuntimeError):
            registry.start()

    def test_stop_ends_loops(self, registry):
        registry.start()
        assert _wait_for(lambda: registry.get("a").status().message == "Synced - pushed")

        registry.stop(timeout=5)

        assert not any(t.is_alive() for t in registry.threads)
