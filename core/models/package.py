# ============================================================================
# PACKAGE DEFINITION MODEL
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core model - Package definition loaded from YAML
# PURPOSE: Declare where a package lives and which raw tags are candidates
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PackageDefinition
# DEPENDENCIES: pydantic
# ============================================================================
"""
Package Definition Model

One YAML file per package under the packages directory:

    name: com.example.widgets
    repoUrl: https://github.com/example/widgets
    gitTagPrefix: v
    gitTagIgnore: -master$

Keys are accepted in camelCase (as written by package submitters) or
snake_case.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PackageDefinition(BaseModel):
    """Template for reconciling one package's releases."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str = Field(..., min_length=1, max_length=214)
    repo_url: str = Field(..., min_length=1, alias="repoUrl")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: Optional[str] = Field(default=None)

    # Candidate selection before semantic parsing
    git_tag_prefix: Optional[str] = Field(
        default=None,
        alias="gitTagPrefix",
        description="Only raw tags starting with this string are candidates",
    )
    git_tag_ignore: Optional[str] = Field(
        default=None,
        alias="gitTagIgnore",
        description="Case-insensitive regex; matching raw tags are dropped",
    )

    @field_validator("git_tag_prefix", "git_tag_ignore", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        """Treat empty YAML values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("git_tag_ignore")
    @classmethod
    def validate_ignore_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            re.compile(v, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"Invalid gitTagIgnore pattern '{v}': {e}")
        return v


__all__ = ["PackageDefinition"]
