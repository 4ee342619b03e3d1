# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core module initialization
# PURPOSE: Export core contracts, models, and schema utilities
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from core.contracts import (
    ReleaseState,
    ReleaseReason,
    BuildJobStatus,
    DEFAULT_RETRYABLE_RELEASE_REASONS,
    is_retryable_reason,
)
from core.models import (
    RemoteTag,
    PackageDefinition,
    Release,
    PackageExtra,
    BuildJob,
    BuildJobConfig,
    BuildReleaseMessage,
)
from core.schema import PydanticToSQL

__all__ = [
    # Enums
    "ReleaseState",
    "ReleaseReason",
    "BuildJobStatus",
    "DEFAULT_RETRYABLE_RELEASE_REASONS",
    "is_retryable_reason",
    # Models
    "RemoteTag",
    "PackageDefinition",
    "Release",
    "PackageExtra",
    "BuildJob",
    "BuildJobConfig",
    "BuildReleaseMessage",
    # Schema
    "PydanticToSQL",
]
