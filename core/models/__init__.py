# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Persisted models define SQL metadata via __sql_* ClassVar attributes
for DDL generation (see core.schema.PydanticToSQL).
"""

from core.models.remote_tag import RemoteTag
from core.models.package import PackageDefinition
from core.models.release import Release
from core.models.package_extra import PackageExtra
from core.models.build_job import (
    BuildJob,
    BuildJobConfig,
    BuildReleaseMessage,
    build_release_job_id,
)

__all__ = [
    # Remote
    "RemoteTag",
    "PackageDefinition",
    # Persisted
    "Release",
    "PackageExtra",
    "BuildJob",
    # Queue
    "BuildJobConfig",
    "BuildReleaseMessage",
    "build_release_job_id",
]
