# ============================================================================
# BUILD JOB MODELS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core model - Work queue records for release builds
# PURPOSE: Job config, persisted job record, and Service Bus message
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: BuildJobConfig, BuildJob, BuildReleaseMessage, build_release_job_id
# DEPENDENCIES: pydantic
# ============================================================================
"""
Build Job Models

A build job is identified by a deterministic key:

    "<job key prefix>:<package_name>:<version>"

Existence of a BuildJob row with that key is the idempotency guard for
scheduling, whatever the row's status.

Lifecycle:
    1. Scheduler records BuildJob (status=SCHEDULED)
    2. BuildReleaseMessage dispatched, optionally with a scheduled enqueue time
    3. Build worker (out of scope) moves the row through ACTIVE -> COMPLETED | FAILED
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from core.contracts import BuildJobStatus


def build_release_job_id(key: str, package_name: str, version: str) -> str:
    """Deterministic job id for building one release."""
    return f"{key}:{package_name}:{version}"


class BuildJobConfig(BaseModel):
    """Queue settings for one kind of job."""

    name: str = Field(default="build-release", max_length=64)
    key: str = Field(default="rel", min_length=1, max_length=32, description="Job id prefix")
    queue_name: str = Field(default="build-release", max_length=64)
    delay_seconds: int = Field(
        default=30, ge=0,
        description="Stagger between successive jobs scheduled in one batch",
    )
    attempts: int = Field(default=3, ge=1, le=20)
    timeout_seconds: int = Field(default=3600, ge=1, le=86400)

    model_config = {"frozen": True}


class BuildJob(BaseModel):
    """
    A build-release job in the work queue.

    Maps to: relapp.build_jobs
    """

    __sql_table__: ClassVar[str] = "build_jobs"
    __sql_schema__: ClassVar[str] = "relapp"
    __sql_primary_key__: ClassVar[List[str]] = ["job_id"]
    __sql_indexes__: ClassVar[List] = [
        ("idx_build_jobs_release", ["package_name", "version"]),
        ("idx_build_jobs_status", ["status"]),
        ("idx_build_jobs_scheduled", ["scheduled_at"], "scheduled_at IS NOT NULL"),
    ]

    job_id: str = Field(..., max_length=400)
    queue_name: str = Field(..., max_length=64)
    package_name: str = Field(..., max_length=214)
    version: str = Field(..., max_length=128)
    status: BuildJobStatus = Field(default=BuildJobStatus.SCHEDULED)
    job_config: Dict[str, Any] = Field(
        default_factory=dict,
        description="Snapshot of the BuildJobConfig at scheduling time",
    )
    scheduled_at: Optional[datetime] = Field(
        default=None,
        description="Earliest start time; NULL means immediately",
    )
    attempts: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": False}

    @computed_field
    @property
    def is_delayed(self) -> bool:
        return self.scheduled_at is not None


class BuildReleaseMessage(BaseModel):
    """
    Message format for the build-release Service Bus queue.

    Carries only identity; the worker reads the Release row itself.
    """

    job_id: str = Field(..., max_length=400)
    package_name: str = Field(..., max_length=214)
    version: str = Field(..., max_length=128)
    tag: str = Field(..., max_length=255)
    commit: str = Field(..., max_length=64)
    attempts: int = Field(default=3, ge=1)
    timeout_seconds: int = Field(default=3600, ge=1)


__all__ = ["BuildJobConfig", "BuildJob", "BuildReleaseMessage", "build_release_job_id"]
