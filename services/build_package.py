# ============================================================================
# BUILD PACKAGE SERVICE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain service - Reconciliation entry point
# PURPOSE: Load package, list remote tags, reconcile releases, schedule builds
# CREATED: 18 OCT 2026
# ============================================================================
"""
BuildPackageService

Top-level flow for one package:

    1. load package definition
    2. list remote tags of its repository
    3. filter tags into valid / invalid
    4. store invalid tags (always, full overwrite)
    5. stop if no valid tags
    6. reconcile releases
    7. schedule build jobs

Pattern: Constructor injection of AsyncConnectionPool, collaborators
built in __init__ and replaceable as attributes (tests swap in mocks).
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

from psycopg_pool import AsyncConnectionPool

from core.contracts import ReleaseReason
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.build_job import BuildJobConfig
from infrastructure.git import GitRemoteTagLister
from messaging import BuildJobPublisher
from repositories import BuildJobRepository, PackageExtraRepository, ReleaseRepository
from services.build_queue import BuildQueue
from services.build_scheduler import BuildScheduler
from services.package_service import PackageService, clean_repo_url
from services.release_reconciler import ReleaseReconciler
from services.release_service import ReleaseService
from services.tag_filter import TagFilter

logger = get_logger(__name__, ComponentType.SERVICE)


@dataclass(frozen=True)
class BuildPackageResult:
    """Summary of one reconciliation run."""
    package_name: str
    valid_tags: int
    invalid_tags: int
    releases: int = 0
    jobs_enqueued: int = 0


class BuildPackageService:
    """Reconcile a package's releases with its remote and schedule builds."""

    def __init__(
        self,
        pool: AsyncConnectionPool,
        publisher: Optional[BuildJobPublisher] = None,
        package_service: Optional[PackageService] = None,
        job_config: Optional[BuildJobConfig] = None,
        retryable_reasons: Optional[FrozenSet[ReleaseReason]] = None,
    ):
        self.pool = pool
        self.package_service = package_service or PackageService()
        self.tag_lister = GitRemoteTagLister()
        self.tag_filter = TagFilter()
        self.extra_repo = PackageExtraRepository(pool)

        release_repo = ReleaseRepository(pool)
        build_job_repo = BuildJobRepository(pool)
        self.scheduler = BuildScheduler(
            BuildQueue(build_job_repo, publisher),
            job_config=job_config,
            retryable_reasons=retryable_reasons,
        )
        self.reconciler = ReleaseReconciler(
            release_repo,
            ReleaseService(release_repo, build_job_repo, job_key=self.scheduler.job_config.key),
        )

    async def build_package(self, name: str) -> BuildPackageResult:
        """
        Run reconciliation and scheduling for one package.

        Raises:
            KeyError: Package definition not found
            ValueError: Invalid package definition or ignore pattern
            GitCommandError: git ls-remote failed
        """
        with log_context(package_name=name, operation="build_package"):
            logger.debug("Loading package definition")
            pkg = self.package_service.load(name)

            logger.debug("Listing remote tags")
            remote_tags = await self.tag_lister.list_remote_tags(
                clean_repo_url(pkg.repo_url, "git")
            )

            result = self.tag_filter.filter(
                remote_tags,
                git_tag_ignore=pkg.git_tag_ignore,
                git_tag_prefix=pkg.git_tag_prefix,
            )
            await self.extra_repo.set_invalid_tags(name, result.invalid_tags)
            log_checkpoint(
                "tags_filtered",
                {"valid": len(result.valid_tags), "invalid": len(result.invalid_tags)},
            )

            if not result.valid_tags:
                logger.info("no valid tags found")
                return BuildPackageResult(
                    package_name=name,
                    valid_tags=0,
                    invalid_tags=len(result.invalid_tags),
                )

            logger.debug("Updating release records")
            releases = await self.reconciler.reconcile(pkg.name, result.valid_tags)

            logger.debug("Adding release jobs")
            jobs = await self.scheduler.schedule(releases)
            log_checkpoint("jobs_scheduled", {"releases": len(releases), "jobs": len(jobs)})

            logger.info(
                f"Reconciled {len(releases)} releases, enqueued {len(jobs)} build jobs"
            )
            return BuildPackageResult(
                package_name=name,
                valid_tags=len(result.valid_tags),
                invalid_tags=len(result.invalid_tags),
                releases=len(releases),
                jobs_enqueued=len(jobs),
            )
