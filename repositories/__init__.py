# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Database access layer
# PURPOSE: CRUD operations for releases, package extras and build jobs
# CREATED: 18 OCT 2026
# ============================================================================
"""
Repositories Module

Provides database access for release reconciliation entities.
Uses psycopg3 async with connection pooling.

Usage:
    from repositories import DatabasePool, ReleaseRepository

    async with DatabasePool() as pool:
        release_repo = ReleaseRepository(pool)
        releases = await release_repo.fetch_all("com.example.widgets")
"""

from .database import DatabasePool, get_connection_string
from .release_repo import ReleaseRepository
from .package_extra_repo import PackageExtraRepository
from .build_job_repo import BuildJobRepository

__all__ = [
    "get_connection_string",
    "DatabasePool",
    "ReleaseRepository",
    "PackageExtraRepository",
    "BuildJobRepository",
]
