# ============================================================================
# RELEASE SERVICE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain service - Release removal
# PURPOSE: Remove a release together with the build job recorded for it
# CREATED: 18 OCT 2026
# ============================================================================
"""
ReleaseService

Removing a release clears the release row and its build job row, so the
version can be materialized and scheduled again from a clean slate.
Missing rows are not an error.
"""

from typing import Optional

from core.config import get_defaults
from core.logging import ComponentType, get_logger
from core.models.build_job import build_release_job_id
from repositories import BuildJobRepository, ReleaseRepository

logger = get_logger(__name__, ComponentType.SERVICE)


class ReleaseService:
    """Mutations on release records outside the reconciler."""

    def __init__(
        self,
        release_repo: ReleaseRepository,
        build_job_repo: BuildJobRepository,
        job_key: Optional[str] = None,
    ):
        self.release_repo = release_repo
        self.build_job_repo = build_job_repo
        self.job_key = job_key or get_defaults().build_job.key

    async def remove_release(self, package_name: str, version: str) -> bool:
        """
        Delete a release and its build job.

        Returns:
            True if a release row was deleted.
        """
        job_id = build_release_job_id(self.job_key, package_name, version)
        job_deleted = await self.build_job_repo.delete(job_id)
        release_deleted = await self.release_repo.delete(package_name, version)

        logger.info(
            f"Removed release {package_name}@{version} "
            f"(release_row={release_deleted}, job_row={job_deleted})"
        )
        return release_deleted
