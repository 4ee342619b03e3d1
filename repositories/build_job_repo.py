# ============================================================================
# BUILD JOB REPOSITORY
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Build job records in the work queue
# PURPOSE: Database access for build_jobs table
# CREATED: 18 OCT 2026
# ============================================================================
"""
BuildJob Repository

The build_jobs primary key is the idempotency guard for scheduling:
create() never overwrites, it reports whether the row was new.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from core.contracts import BuildJobStatus
from core.models.build_job import BuildJob
from .database import TABLE_BUILD_JOBS

logger = logging.getLogger(__name__)


class BuildJobRepository:
    """Repository for BuildJob entities."""

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    async def get(self, job_id: str) -> Optional[BuildJob]:
        """
        Get a job by ID.

        Returns:
            BuildJob or None if not found
        """
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                sql.SQL("SELECT * FROM {} WHERE job_id = %s").format(TABLE_BUILD_JOBS),
                (job_id,),
            )
            row = await result.fetchone()
            return self._row_to_model(row) if row else None

    async def create(self, job: BuildJob) -> Tuple[BuildJob, bool]:
        """
        Insert a job unless one with the same job_id exists.

        Returns:
            Tuple of (job, created). created=False means the stored row
            was returned and nothing was written.
        """
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                sql.SQL("""
                    INSERT INTO {} (
                        job_id, queue_name, package_name, version, status,
                        job_config, scheduled_at, attempts, created_at, updated_at
                    ) VALUES (
                        %(job_id)s, %(queue_name)s, %(package_name)s, %(version)s, %(status)s,
                        %(job_config)s, %(scheduled_at)s, %(attempts)s, %(created_at)s, %(updated_at)s
                    )
                    ON CONFLICT (job_id) DO NOTHING
                    RETURNING *
                """).format(TABLE_BUILD_JOBS),
                {
                    "job_id": job.job_id,
                    "queue_name": job.queue_name,
                    "package_name": job.package_name,
                    "version": job.version,
                    "status": job.status.value,
                    "job_config": Json(job.job_config),
                    "scheduled_at": job.scheduled_at,
                    "attempts": job.attempts,
                    "created_at": job.created_at,
                    "updated_at": job.updated_at,
                },
            )
            row = await result.fetchone()

            if row is not None:
                logger.info(f"Created build job {job.job_id}")
                return self._row_to_model(row), True

            result = await conn.execute(
                sql.SQL("SELECT * FROM {} WHERE job_id = %s").format(TABLE_BUILD_JOBS),
                (job.job_id,),
            )
            row = await result.fetchone()
            logger.info(f"Build job {job.job_id} already exists")
            return self._row_to_model(row), False

    async def delete(self, job_id: str) -> bool:
        """
        Hard delete a job.

        Returns:
            True if deleted, False if not found.
        """
        async with self.pool.connection() as conn:
            result = await conn.execute(
                sql.SQL("DELETE FROM {} WHERE job_id = %s").format(TABLE_BUILD_JOBS),
                (job_id,),
            )
            if result.rowcount > 0:
                logger.info(f"Deleted build job {job_id}")
            return result.rowcount > 0

    def _row_to_model(self, row: Dict[str, Any]) -> BuildJob:
        """Convert a database row to a BuildJob instance."""
        return BuildJob(
            job_id=row["job_id"],
            queue_name=row["queue_name"],
            package_name=row["package_name"],
            version=row["version"],
            status=BuildJobStatus(row["status"]),
            job_config=row.get("job_config") or {},
            scheduled_at=row.get("scheduled_at"),
            attempts=row.get("attempts", 0),
            created_at=row["created_at"],
            updated_at=row.get("updated_at") or row["created_at"],
        )
