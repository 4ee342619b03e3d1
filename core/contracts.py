# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Foundation - Core enums for releases and build jobs
# PURPOSE: Closed state/reason enumerations shared by stores and services
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ReleaseState, ReleaseReason, BuildJobStatus,
#          DEFAULT_RETRYABLE_RELEASE_REASONS, is_retryable_reason
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the release reconciliation system.

These values cross boundaries:
- SQL (PostgreSQL enum / integer columns)
- Queue (Service Bus message properties)
- Python (scheduling decisions)
"""

from enum import Enum, IntEnum
from typing import FrozenSet, Iterable, Optional, Union


# ============================================================================
# STATUS ENUMS
# ============================================================================

class ReleaseState(str, Enum):
    """
    Release lifecycle states.

    State transitions (driven by the build pipeline):
        PENDING -> BUILDING -> SUCCEEDED
                            -> FAILED
        FAILED  -> PENDING (rescheduled, retryable reason only)
    """
    PENDING = "pending"          # Release recorded, build not started
    BUILDING = "building"        # Build job picked up by a worker
    SUCCEEDED = "succeeded"      # Build published
    FAILED = "failed"            # Build failed, see reason

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (ReleaseState.SUCCEEDED, ReleaseState.FAILED)


class ReleaseReason(IntEnum):
    """
    Reason code explaining a release's current or last state.

    HTTP-like codes come from the registry a build publishes to;
    codes from 1100 up are raised by the build itself.
    """
    NONE = 0
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    PACKAGE_NOT_FOUND = 404
    VERSION_CONFLICT = 409
    ENTITY_TOO_LARGE = 413
    INTERNAL_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    PACKAGE_NAME_NOT_MATCHED = 1100
    VERSION_NOT_MATCHED = 1101
    REMOTE_TAG_NOT_FOUND = 1102
    PACKAGE_JSON_NOT_FOUND = 1103
    PACKAGE_JSON_PARSING_ERROR = 1104
    BUILD_TIMEOUT = 1105

    @property
    def label(self) -> str:
        """Human-readable label, e.g. 'Service Unavailable'."""
        return self.name.replace("_", " ").title()

    @classmethod
    def get(cls, code: Optional[Union[int, str, "ReleaseReason"]]) -> "ReleaseReason":
        """
        Resolve a stored code to a member.

        Accepts a member, an integer code, or a member name.
        Unknown or missing codes resolve to NONE.
        """
        if code is None:
            return cls.NONE
        if isinstance(code, cls):
            return code
        if isinstance(code, str):
            key = code.strip().upper()
            if key in cls.__members__:
                return cls[key]
            if not key.lstrip("-").isdigit():
                return cls.NONE
            code = int(key)
        try:
            return cls(int(code))
        except ValueError:
            return cls.NONE


class BuildJobStatus(str, Enum):
    """
    Build job states in the work queue.

    SCHEDULED -> ACTIVE -> COMPLETED
                        -> FAILED
    """
    SCHEDULED = "scheduled"      # Recorded and dispatched (possibly delayed)
    ACTIVE = "active"            # Worker executing the build
    COMPLETED = "completed"
    FAILED = "failed"            # Attempts exhausted

    def is_terminal(self) -> bool:
        return self in (BuildJobStatus.COMPLETED, BuildJobStatus.FAILED)


# ============================================================================
# RETRY POLICY
# ============================================================================

# Transient causes: a later scan may succeed without anyone changing the release.
DEFAULT_RETRYABLE_RELEASE_REASONS: FrozenSet[ReleaseReason] = frozenset({
    ReleaseReason.NONE,
    ReleaseReason.INTERNAL_ERROR,
    ReleaseReason.BAD_GATEWAY,
    ReleaseReason.SERVICE_UNAVAILABLE,
    ReleaseReason.GATEWAY_TIMEOUT,
    ReleaseReason.BUILD_TIMEOUT,
})


def is_retryable_reason(
    reason: Optional[Union[int, str, ReleaseReason]],
    retryable: Optional[Iterable[ReleaseReason]] = None,
) -> bool:
    """
    Check whether a failed release with this reason may be rescheduled.

    Args:
        reason: Stored reason code (member, int, name or None)
        retryable: Retryable subset; defaults to DEFAULT_RETRYABLE_RELEASE_REASONS
    """
    allowed = DEFAULT_RETRYABLE_RELEASE_REASONS if retryable is None else frozenset(retryable)
    return ReleaseReason.get(reason) in allowed
