# ============================================================================
# RELEASE REPOSITORY
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain - Release CRUD operations
# PURPOSE: Database access for releases table
# CREATED: 18 OCT 2026
# ============================================================================
"""
Release Repository

CRUD operations for releases, keyed by (package_name, version).
All SQL uses psycopg sql.SQL composition for injection safety.
"""

import logging
from typing import Any, Dict, List, Optional

from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from core.models.release import Release
from core.contracts import ReleaseReason, ReleaseState
from .database import TABLE_RELEASES

logger = logging.getLogger(__name__)


class ReleaseRepository:
    """Repository for Release entities."""

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    async def fetch_all(self, package_name: str) -> List[Release]:
        """List all releases of a package, oldest first."""
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                sql.SQL(
                    "SELECT * FROM {} WHERE package_name = %s ORDER BY created_at, version"
                ).format(TABLE_RELEASES),
                (package_name,),
            )
            rows = await result.fetchall()
            return [self._row_to_model(row) for row in rows]

    async def fetch_one(self, package_name: str, version: str) -> Optional[Release]:
        """Get a release by composite PK."""
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                sql.SQL(
                    "SELECT * FROM {} WHERE package_name = %s AND version = %s"
                ).format(TABLE_RELEASES),
                (package_name, version),
            )
            row = await result.fetchone()
            return self._row_to_model(row) if row else None

    async def save(self, release: Release) -> Release:
        """
        Insert a release, idempotent by (package_name, version).

        If another run inserted the same key first, the stored row is
        returned unchanged; existing records are never overwritten here.
        """
        async with self.pool.connection() as conn:
            conn.row_factory = dict_row
            result = await conn.execute(
                sql.SQL("""
                    INSERT INTO {} (
                        package_name, version, commit, tag,
                        state, reason, build_id,
                        created_at, updated_at, row_version
                    ) VALUES (
                        %(package_name)s, %(version)s, %(commit)s, %(tag)s,
                        %(state)s, %(reason)s, %(build_id)s,
                        %(created_at)s, %(updated_at)s, %(row_version)s
                    )
                    ON CONFLICT (package_name, version) DO NOTHING
                    RETURNING *
                """).format(TABLE_RELEASES),
                {
                    "package_name": release.package_name,
                    "version": release.version,
                    "commit": release.commit,
                    "tag": release.tag,
                    "state": release.state.value,
                    "reason": int(release.reason),
                    "build_id": release.build_id,
                    "created_at": release.created_at,
                    "updated_at": release.updated_at,
                    "row_version": release.row_version,
                },
            )
            row = await result.fetchone()

            if row is not None:
                logger.info(f"Created release {release.display_name} ({release.tag}@{release.commit})")
                return self._row_to_model(row)

            result = await conn.execute(
                sql.SQL(
                    "SELECT * FROM {} WHERE package_name = %s AND version = %s"
                ).format(TABLE_RELEASES),
                (release.package_name, release.version),
            )
            row = await result.fetchone()
            logger.info(f"Release {release.display_name} already exists, keeping stored record")
            return self._row_to_model(row)

    async def delete(self, package_name: str, version: str) -> bool:
        """
        Hard delete a release.

        Returns:
            True if deleted, False if not found.
        """
        async with self.pool.connection() as conn:
            result = await conn.execute(
                sql.SQL(
                    "DELETE FROM {} WHERE package_name = %s AND version = %s"
                ).format(TABLE_RELEASES),
                (package_name, version),
            )
            if result.rowcount > 0:
                logger.info(f"Deleted release {package_name}@{version}")
            return result.rowcount > 0

    def _row_to_model(self, row: Dict[str, Any]) -> Release:
        """Convert a database row to a Release instance."""
        return Release(
            package_name=row["package_name"],
            version=row["version"],
            commit=row["commit"],
            tag=row["tag"],
            state=ReleaseState(row["state"]),
            reason=ReleaseReason.get(row.get("reason")),
            build_id=row.get("build_id"),
            created_at=row["created_at"],
            updated_at=row.get("updated_at") or row["created_at"],
            row_version=row.get("row_version", 1),
        )
