# ============================================================================
# REMOTE TAG MODEL
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core model - Raw datum from the source-control remote
# PURPOSE: (tag, commit) pair as reported by git ls-remote
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: RemoteTag
# DEPENDENCIES: pydantic
# ============================================================================
"""
RemoteTag Model

Ephemeral and never persisted on its own. Frozen so tag lists can be
passed between filtering steps as immutable tuples and compared by value.
"""

from pydantic import BaseModel, Field


class RemoteTag(BaseModel):
    """A tag name and the commit it resolves to."""

    tag: str = Field(..., min_length=1, description="Literal ref name, without refs/tags/")
    commit: str = Field(..., min_length=1, description="Resolved commit hash")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.tag}@{self.commit}"


__all__ = ["RemoteTag"]
