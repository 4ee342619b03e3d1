# ============================================================================
# RELEASE MODEL
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain model - One package version's build attempt and outcome
# PURPOSE: Persisted record keyed by (package_name, version)
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: Release
# DEPENDENCIES: pydantic
# ============================================================================
"""
Release Model

A Release is created by the reconciler when a valid remote tag maps to a
version the store does not know yet. The build pipeline moves it through
its states afterwards; the reconciler only ever creates or removes rows.

Composite PK: (package_name, version)
"""

from datetime import datetime, timezone
from typing import ClassVar, List, Optional

from pydantic import BaseModel, Field, computed_field

from core.contracts import ReleaseReason, ReleaseState

# Column widths of releases.tag and releases.version
MAX_TAG_LENGTH = 255
MAX_VERSION_LENGTH = 128


class Release(BaseModel):
    """
    One semantic version of a package.

    Maps to: relapp.releases
    """

    # SQL DDL METADATA
    __sql_table__: ClassVar[str] = "releases"
    __sql_schema__: ClassVar[str] = "relapp"
    __sql_primary_key__: ClassVar[List[str]] = ["package_name", "version"]
    __sql_indexes__: ClassVar[List] = [
        ("idx_releases_package", ["package_name"]),
        ("idx_releases_state", ["state"]),
        ("idx_releases_failed", ["package_name"], "state = 'failed'"),
    ]

    # Identity
    package_name: str = Field(..., max_length=214)
    version: str = Field(..., max_length=MAX_VERSION_LENGTH, description="Parsed semantic version")

    # Source
    commit: str = Field(..., max_length=64, description="Commit the tag resolved to")
    tag: str = Field(..., max_length=MAX_TAG_LENGTH, description="Raw tag the version was derived from")

    # Build outcome
    state: ReleaseState = Field(default=ReleaseState.PENDING)
    reason: ReleaseReason = Field(default=ReleaseReason.NONE)
    build_id: Optional[str] = Field(default=None, max_length=128)

    # Timestamps & locking
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    row_version: int = Field(default=1, ge=1, description="Row version for optimistic locking")

    model_config = {"frozen": False}

    @computed_field
    @property
    def display_name(self) -> str:
        """'<package_name>@<version>', as used in log lines."""
        return f"{self.package_name}@{self.version}"

    def matches_tag(self, tag: str, commit: str) -> bool:
        """True if this release was built from exactly this tag and commit."""
        return self.tag == tag and self.commit == commit


__all__ = ["Release"]
