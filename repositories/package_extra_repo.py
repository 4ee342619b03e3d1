# ============================================================================
# PACKAGE EXTRA REPOSITORY
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain - Diagnostic metadata per package
# PURPOSE: Database access for package_extras table
# CREATED: 18 OCT 2026
# ============================================================================
"""
PackageExtra Repository

Upsert-only writes: invalid_tags is replaced wholesale on every run.
"""

import logging
from datetime import datetime, timezone
from typing import Sequence

from psycopg import sql
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from core.models.remote_tag import RemoteTag
from .database import TABLE_PACKAGE_EXTRAS

logger = logging.getLogger(__name__)


class PackageExtraRepository:
    """Repository for PackageExtra entities."""

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool

    async def set_invalid_tags(self, package_name: str, tags: Sequence[RemoteTag]) -> None:
        """Overwrite the invalid tag list of a package."""
        payload = [tag.model_dump() for tag in tags]
        async with self.pool.connection() as conn:
            await conn.execute(
                sql.SQL("""
                    INSERT INTO {} (package_name, invalid_tags, updated_at)
                    VALUES (%(package_name)s, %(invalid_tags)s, %(updated_at)s)
                    ON CONFLICT (package_name) DO UPDATE SET
                        invalid_tags = EXCLUDED.invalid_tags,
                        updated_at = EXCLUDED.updated_at
                """).format(TABLE_PACKAGE_EXTRAS),
                {
                    "package_name": package_name,
                    "invalid_tags": Json(payload),
                    "updated_at": datetime.now(timezone.utc),
                },
            )
        logger.debug(f"Stored {len(payload)} invalid tags for {package_name}")
