# ============================================================================
# BUILD SCHEDULER
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain logic - Build job scheduling
# PURPOSE: Enqueue exactly the missing build jobs, staggered over time
# CREATED: 18 OCT 2026
# ============================================================================
"""
BuildScheduler

For each release, in order:

    job_id = "<key>:<package_name>:<version>"

    skip  if a job with job_id exists (any status)
    skip  if the release SUCCEEDED
    skip  if the release FAILED for a non-retryable reason
    else  enqueue with delay 0 for the first job of the batch and
          now + i * delay_seconds for the i-th one after it

Only enqueued jobs advance the stagger counter. The job-existence check
and the insert are separate calls; the queue rejects duplicate ids.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, FrozenSet, Iterable, List, Optional, Union

from core.config import get_defaults
from core.contracts import ReleaseReason, ReleaseState, is_retryable_reason
from core.logging import ComponentType, get_logger, log_context
from core.models.build_job import BuildJob, BuildJobConfig, build_release_job_id
from core.models.release import Release
from services.build_queue import BuildQueue

logger = get_logger(__name__, ComponentType.SERVICE)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def should_schedule(
    release: Release,
    existing_job: Optional[BuildJob],
    retryable: Optional[FrozenSet[ReleaseReason]] = None,
) -> bool:
    """Whether a build job must be enqueued for release."""
    if existing_job is not None:
        return False
    if release.state == ReleaseState.SUCCEEDED:
        return False
    if release.state == ReleaseState.FAILED and not is_retryable_reason(release.reason, retryable):
        return False
    return True


def compute_delay(i: int, delay_seconds: int, now: datetime) -> Union[int, datetime]:
    """0 for the first job of a batch, else the absolute start time."""
    if i == 0:
        return 0
    return now + timedelta(seconds=i * delay_seconds)


class BuildScheduler:
    """Turn releases into build jobs on an injected queue."""

    def __init__(
        self,
        queue: BuildQueue,
        job_config: Optional[BuildJobConfig] = None,
        retryable_reasons: Optional[FrozenSet[ReleaseReason]] = None,
        clock: Clock = utcnow,
    ):
        defaults = get_defaults()
        self.queue = queue
        self.job_config = job_config or defaults.build_job.to_job_config()
        self.retryable_reasons = (
            retryable_reasons
            if retryable_reasons is not None
            else defaults.release_policy.retryable_reasons
        )
        self.clock = clock

    async def schedule(self, releases: Iterable[Release]) -> List[BuildJob]:
        """
        Enqueue build jobs for releases that need one.

        Returns:
            Jobs enqueued by this call, in order
        """
        enqueued = []
        i = 0
        for release in releases:
            job_id = build_release_job_id(
                self.job_config.key, release.package_name, release.version
            )
            with log_context(release=release.display_name, job_id=job_id):
                existing = await self.queue.get_job(job_id)
                if not should_schedule(release, existing, self.retryable_reasons):
                    logger.debug(
                        f"Skipping {release.display_name}: job_exists={existing is not None} "
                        f"state={release.state.value} reason={release.reason.label}"
                    )
                    continue

                delay = compute_delay(i, self.job_config.delay_seconds, self.clock())
                job = await self.queue.add_job(
                    job_id=job_id,
                    job_config=self.job_config,
                    delay=delay,
                    release=release,
                )
                i += 1
                enqueued.append(job)
                logger.info(
                    f"Enqueued {job_id}"
                    + (f" at {delay.isoformat()}" if isinstance(delay, datetime) else "")
                )
        return enqueued
