# ============================================================================
# DATABASE CONNECTION POOL
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Async PostgreSQL connection management
# PURPOSE: Connection settings and the async pool shared by repositories
# CREATED: 18 OCT 2026
# ============================================================================
"""
Database Connection Pool

Repositories take an AsyncConnectionPool in their constructor; the driver
(tools/build_package.py) owns the pool through DatabasePool. One pool is
shared by every repository of a run.

Connection settings, in priority order:
1. DATABASE_URL
2. Individual POSTGRES_* variables

Usage:
    from repositories import DatabasePool, ReleaseRepository

    async with DatabasePool() as pool:
        release_repo = ReleaseRepository(pool)
"""

import logging
import os
from typing import Optional

from psycopg import ProgrammingError
from psycopg import sql as psycopg_sql
from psycopg.conninfo import conninfo_to_dict, make_conninfo
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)

# POSTGRES_* variable -> libpq keyword, with fallback
_ENV_CONNINFO = (
    ("POSTGRES_HOST", "host", "localhost"),
    ("POSTGRES_PORT", "port", "5432"),
    ("POSTGRES_DB", "dbname", "postgres"),
    ("POSTGRES_USER", "user", "postgres"),
    ("POSTGRES_PASSWORD", "password", None),
    ("POSTGRES_SSLMODE", "sslmode", "prefer"),
)


def get_connection_string() -> str:
    """Connection string from DATABASE_URL or the POSTGRES_* variables."""
    if url := os.environ.get("DATABASE_URL"):
        return url

    params = {}
    for env_name, keyword, fallback in _ENV_CONNINFO:
        value = os.environ.get(env_name, fallback)
        if value:
            params[keyword] = value
    return make_conninfo(**params)


def mask_connection_string(conninfo: str) -> str:
    """host:port/dbname of a connection string, credentials dropped."""
    try:
        params = conninfo_to_dict(conninfo)
    except ProgrammingError:
        return "<unparseable connection string>"
    host = params.get("host", "localhost")
    port = params.get("port", "5432")
    return f"{host}:{port}/{params.get('dbname', '')}"


class DatabasePool:
    """
    Async context manager owning one AsyncConnectionPool.

    Usage:
        async with DatabasePool(max_size=10) as pool:
            async with pool.connection() as conn:
                ...
    """

    def __init__(
        self,
        min_size: int = 1,
        max_size: int = 5,
        connection_string: Optional[str] = None,
    ):
        self.min_size = min_size
        self.max_size = max_size
        self.connection_string = connection_string
        self.pool: Optional[AsyncConnectionPool] = None

    async def __aenter__(self) -> AsyncConnectionPool:
        conninfo = self.connection_string or get_connection_string()
        logger.info(f"Opening connection pool: {mask_connection_string(conninfo)}")

        self.pool = AsyncConnectionPool(
            conninfo=conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            open=False,
        )
        await self.pool.open()
        return self.pool

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            logger.info("Connection pool closed")


# ============================================================================
# SCHEMA CONSTANTS
# ============================================================================

SCHEMA = os.environ.get("RELEASE_DB_SCHEMA", "relapp")

# Qualified identifiers for sql.SQL().format()
TABLE_RELEASES = psycopg_sql.Identifier(SCHEMA, "releases")
TABLE_PACKAGE_EXTRAS = psycopg_sql.Identifier(SCHEMA, "package_extras")
TABLE_BUILD_JOBS = psycopg_sql.Identifier(SCHEMA, "build_jobs")
