# ============================================================================
# PACKAGE EXTRA MODEL
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain model - Diagnostic metadata per package
# PURPOSE: Hold the remote tags that failed filtering on the last run
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PackageExtra
# DEPENDENCIES: pydantic
# ============================================================================
"""
PackageExtra Model

Informational only. invalid_tags is fully overwritten on every
reconciliation run; nothing reads it to make scheduling decisions.
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List

from pydantic import BaseModel, Field

from core.models.remote_tag import RemoteTag


class PackageExtra(BaseModel):
    """
    Extra metadata for a package.

    Maps to: relapp.package_extras
    """

    __sql_table__: ClassVar[str] = "package_extras"
    __sql_schema__: ClassVar[str] = "relapp"
    __sql_primary_key__: ClassVar[List[str]] = ["package_name"]
    __sql_indexes__: ClassVar[List] = []

    package_name: str = Field(..., max_length=214)
    invalid_tags: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Remote tags ({tag, commit}) rejected by the tag filter",
    )
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": False}

    @property
    def invalid_remote_tags(self) -> List[RemoteTag]:
        return [RemoteTag.model_validate(item) for item in self.invalid_tags]


__all__ = ["PackageExtra"]
