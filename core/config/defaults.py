# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for build jobs, retry policy, package sources
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for release reconciliation and build scheduling.
These can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from core.contracts import DEFAULT_RETRYABLE_RELEASE_REASONS, ReleaseReason
from core.models.build_job import BuildJobConfig


@dataclass(frozen=True)
class BuildJobDefaults:
    """
    Defaults for build-release jobs.

    delay_seconds spreads a batch of new jobs over time: the first job
    of a batch starts immediately, the k-th one k * delay_seconds later.
    """
    name: str = "build-release"
    key: str = "rel"
    queue_name: str = "build-release"
    delay_seconds: int = 30
    attempts: int = 3
    timeout_seconds: int = 3600  # 1 hour

    def to_job_config(self) -> BuildJobConfig:
        """Materialize as the config object handed to the queue."""
        return BuildJobConfig(
            name=self.name,
            key=self.key,
            queue_name=self.queue_name,
            delay_seconds=self.delay_seconds,
            attempts=self.attempts,
            timeout_seconds=self.timeout_seconds,
        )

    @classmethod
    def from_env(cls) -> "BuildJobDefaults":
        """Create from environment variables."""
        return cls(
            key=os.getenv("BUILD_RELEASE_JOB_KEY", "rel"),
            queue_name=os.getenv("BUILD_RELEASE_QUEUE", "build-release"),
            delay_seconds=int(os.getenv("BUILD_RELEASE_DELAY_SECONDS", 30)),
            attempts=int(os.getenv("BUILD_RELEASE_ATTEMPTS", 3)),
            timeout_seconds=int(os.getenv("BUILD_RELEASE_TIMEOUT_SECONDS", 3600)),
        )


def parse_reason_list(value: str) -> FrozenSet[ReleaseReason]:
    """
    Parse a comma-separated list of reason names or codes.

    'SERVICE_UNAVAILABLE, 504' -> {SERVICE_UNAVAILABLE, GATEWAY_TIMEOUT}

    Raises:
        ValueError: An entry names no known reason
    """
    reasons = set()
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        key = item.upper()
        if key in ReleaseReason.__members__:
            reasons.add(ReleaseReason[key])
        elif item.isdigit() and int(item) in ReleaseReason._value2member_map_:
            reasons.add(ReleaseReason(int(item)))
        else:
            raise ValueError(f"Unknown release reason: {item}")
    return frozenset(reasons)


@dataclass(frozen=True)
class ReleasePolicyDefaults:
    """
    Defaults for release rescheduling.

    A failed release is only rescheduled when its reason is retryable.
    """
    retryable_reasons: FrozenSet[ReleaseReason] = DEFAULT_RETRYABLE_RELEASE_REASONS

    @classmethod
    def from_env(cls) -> "ReleasePolicyDefaults":
        """Create from environment variables."""
        value = os.getenv("RETRYABLE_RELEASE_REASONS")
        if not value:
            return cls()
        return cls(retryable_reasons=parse_reason_list(value))


@dataclass(frozen=True)
class PackageSourceDefaults:
    """Defaults for package definitions and git access."""
    packages_dir: str = "packages"
    git_ls_remote_timeout: float = 60.0  # seconds

    @classmethod
    def from_env(cls) -> "PackageSourceDefaults":
        """Create from environment variables."""
        return cls(
            packages_dir=os.getenv("PACKAGES_DIR", "packages"),
            git_ls_remote_timeout=float(os.getenv("GIT_LS_REMOTE_TIMEOUT", 60.0)),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    build_job: BuildJobDefaults = field(default_factory=BuildJobDefaults)
    release_policy: ReleasePolicyDefaults = field(default_factory=ReleasePolicyDefaults)
    package_source: PackageSourceDefaults = field(default_factory=PackageSourceDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            build_job=BuildJobDefaults.from_env(),
            release_policy=ReleasePolicyDefaults.from_env(),
            package_source=PackageSourceDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "BuildJobDefaults",
    "ReleasePolicyDefaults",
    "PackageSourceDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
    "parse_reason_list",
]
