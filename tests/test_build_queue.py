# ============================================================================
# BUILD QUEUE TESTS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Tests - Idempotent job record and dispatch
# PURPOSE: Verify add_job records once and dispatches only fresh jobs
# CREATED: 18 OCT 2026
# ============================================================================
"""
BuildQueue Tests

Repository and publisher are mocked. No database, no Service Bus.

Run with:
    pytest tests/test_build_queue.py -v
"""

import asyncio
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from core.contracts import BuildJobStatus
from core.models.build_job import BuildJob, BuildJobConfig, BuildReleaseMessage
from core.models.release import Release
from services.build_queue import BuildQueue
from services.build_scheduler import BuildScheduler


PKG = "com.example.widgets"
JOB_ID = f"rel:{PKG}:1.0.0"


# ============================================================================
# HELPERS
# ============================================================================

def _make_release():
    return Release(package_name=PKG, version="1.0.0", tag="v1.0.0", commit="abc123")


def _build_queue(created=True, with_publisher=True):
    """Build a BuildQueue whose repo echoes the job back."""
    repo = AsyncMock()

    async def _create(job):
        return job, created

    repo.create.side_effect = _create
    publisher = AsyncMock() if with_publisher else None
    return BuildQueue(repo, publisher), repo, publisher


# ============================================================================
# ADD JOB
# ============================================================================

class TestAddJob:
    def test_fresh_job_is_recorded_and_dispatched(self):
        queue, repo, publisher = _build_queue()
        config = BuildJobConfig(queue_name="builds", attempts=5, timeout_seconds=600)

        job = asyncio.run(queue.add_job(JOB_ID, config, 0, _make_release()))

        recorded = repo.create.await_args.args[0]
        assert recorded.job_id == JOB_ID
        assert recorded.queue_name == "builds"
        assert recorded.status == BuildJobStatus.SCHEDULED
        assert recorded.scheduled_at is None
        assert recorded.job_config["timeout_seconds"] == 600
        assert job is recorded

        message, = publisher.dispatch_build.await_args.args
        assert isinstance(message, BuildReleaseMessage)
        assert message.job_id == JOB_ID
        assert message.tag == "v1.0.0"
        assert message.commit == "abc123"
        assert message.attempts == 5
        assert publisher.dispatch_build.await_args.kwargs["scheduled_at"] is None

    def test_delayed_job_is_scheduled(self):
        queue, repo, publisher = _build_queue()
        when = datetime(2026, 10, 18, 12, 5, tzinfo=timezone.utc)

        job = asyncio.run(queue.add_job(JOB_ID, BuildJobConfig(), when, _make_release()))

        assert job.scheduled_at == when
        assert job.is_delayed is True
        assert publisher.dispatch_build.await_args.kwargs["scheduled_at"] == when

    def test_duplicate_id_returns_existing_without_dispatch(self):
        queue, repo, publisher = _build_queue(created=False)

        job = asyncio.run(queue.add_job(JOB_ID, BuildJobConfig(), 0, _make_release()))

        assert job.job_id == JOB_ID
        publisher.dispatch_build.assert_not_awaited()

    def test_without_publisher_writes_nothing(self):
        queue, repo, _ = _build_queue(with_publisher=False)

        job = asyncio.run(queue.add_job(JOB_ID, BuildJobConfig(), 0, _make_release()))

        assert queue.dry_run is True
        assert job.job_id == JOB_ID
        repo.create.assert_not_awaited()

    def test_dispatch_failure_removes_record_and_raises(self):
        queue, repo, publisher = _build_queue()
        publisher.dispatch_build.side_effect = RuntimeError("Service Bus auth failed")

        with pytest.raises(RuntimeError, match="auth failed"):
            asyncio.run(queue.add_job(JOB_ID, BuildJobConfig(), 0, _make_release()))

        repo.delete.assert_awaited_once_with(JOB_ID)


class TestGetJob:
    def test_delegates_to_repo(self):
        queue, repo, _ = _build_queue()
        stored = BuildJob(job_id=JOB_ID, queue_name="build-release", package_name=PKG, version="1.0.0")
        repo.get.return_value = stored

        assert asyncio.run(queue.get_job(JOB_ID)) is stored
        repo.get.assert_awaited_once_with(JOB_ID)


# ============================================================================
# DRY RUN THEN REAL RUN
# ============================================================================

class _InMemoryJobRepo:
    """build_jobs table keyed by job_id."""

    def __init__(self):
        self.jobs = {}

    async def get(self, job_id):
        return self.jobs.get(job_id)

    async def create(self, job):
        if job.job_id in self.jobs:
            return self.jobs[job.job_id], False
        self.jobs[job.job_id] = job
        return job, True

    async def delete(self, job_id):
        return self.jobs.pop(job_id, None) is not None


class TestDryRunThenRealRun:
    def test_real_run_after_dry_run_dispatches(self):
        repo = _InMemoryJobRepo()
        release = _make_release()

        dry_jobs = asyncio.run(BuildScheduler(BuildQueue(repo, publisher=None)).schedule([release]))
        assert [j.job_id for j in dry_jobs] == [JOB_ID]
        assert repo.jobs == {}

        publisher = AsyncMock()
        real_jobs = asyncio.run(BuildScheduler(BuildQueue(repo, publisher)).schedule([release]))

        assert [j.job_id for j in real_jobs] == [JOB_ID]
        assert publisher.dispatch_build.await_count == 1
        assert JOB_ID in repo.jobs
