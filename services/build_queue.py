# ============================================================================
# BUILD QUEUE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Work queue for build-release jobs
# PURPOSE: Record build jobs idempotently and dispatch them to workers
# CREATED: 18 OCT 2026
# ============================================================================
"""
BuildQueue

Work queue used by the BuildScheduler. The build_jobs table is the record
of which jobs exist; Service Bus carries them to build workers.

add_job is idempotent on job_id: when a job with the same id was already
recorded (e.g. by a concurrent reconciliation run), the stored job is
returned and nothing is dispatched.

Without a publisher the queue is a dry run: existing jobs are still read,
but add_job returns the job it would record and writes nothing, so a
later real run schedules the same releases.
"""

from datetime import datetime
from typing import Optional, Union

from core.logging import ComponentType, get_logger
from core.models.build_job import BuildJob, BuildJobConfig, BuildReleaseMessage
from core.models.release import Release
from messaging import BuildJobPublisher
from repositories import BuildJobRepository

logger = get_logger(__name__, ComponentType.SERVICE)

Delay = Union[int, datetime]


class BuildQueue:
    """Build job queue over the build_jobs table and Service Bus."""

    def __init__(
        self,
        build_job_repo: BuildJobRepository,
        publisher: Optional[BuildJobPublisher] = None,
    ):
        self.build_job_repo = build_job_repo
        self.publisher = publisher

    @property
    def dry_run(self) -> bool:
        return self.publisher is None

    async def get_job(self, job_id: str) -> Optional[BuildJob]:
        """Look up a job by id, whatever its status."""
        return await self.build_job_repo.get(job_id)

    async def add_job(
        self,
        job_id: str,
        job_config: BuildJobConfig,
        delay: Delay,
        release: Release,
    ) -> BuildJob:
        """
        Record and dispatch a build job.

        Args:
            job_id: Deterministic job id
            job_config: Queue settings snapshot stored with the job
            delay: 0 to start immediately, or the aware UTC start time
            release: Release to build

        Returns:
            The recorded job (the pre-existing one on duplicate id), or
            the unsaved job on a dry run
        """
        scheduled_at = delay if isinstance(delay, datetime) else None
        job = BuildJob(
            job_id=job_id,
            queue_name=job_config.queue_name,
            package_name=release.package_name,
            version=release.version,
            job_config=job_config.model_dump(),
            scheduled_at=scheduled_at,
        )

        if self.dry_run:
            logger.info(f"[DRY RUN] Would enqueue {job_id}")
            return job

        job, created = await self.build_job_repo.create(job)
        if not created:
            logger.info(f"Job {job_id} already queued, not dispatching again")
            return job

        message = BuildReleaseMessage(
            job_id=job_id,
            package_name=release.package_name,
            version=release.version,
            tag=release.tag,
            commit=release.commit,
            attempts=job_config.attempts,
            timeout_seconds=job_config.timeout_seconds,
        )
        try:
            await self.publisher.dispatch_build(message, scheduled_at=scheduled_at)
        except Exception:
            # Unsent jobs must not block the next scan
            await self.build_job_repo.delete(job_id)
            raise

        return job
