# ============================================================================
# SERVICES MODULE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Services - Business logic layer
# PURPOSE: Tag filtering, release reconciliation, build scheduling
# CREATED: 18 OCT 2026
# ============================================================================
"""
Services Module

Business logic layer between the driver and the repositories.

Services:
    - TagFilter: Select valid version tags from a remote's tags
    - ReleaseReconciler: Evict stale failed releases, create missing ones
    - BuildScheduler: Enqueue missing build jobs with stagger
    - BuildQueue: Idempotent build job record plus Service Bus dispatch
    - ReleaseService: Remove a release and its build job
    - PackageService: Load package definitions from YAML
    - BuildPackageService: The whole flow for one package
"""

from .tag_filter import TagFilter, TagFilterResult, select_valid_tags
from .release_service import ReleaseService
from .release_reconciler import ReleaseReconciler
from .build_queue import BuildQueue
from .build_scheduler import BuildScheduler, compute_delay, should_schedule
from .package_service import PackageService, clean_repo_url
from .build_package import BuildPackageService, BuildPackageResult

__all__ = [
    "TagFilter",
    "TagFilterResult",
    "select_valid_tags",
    "ReleaseService",
    "ReleaseReconciler",
    "BuildQueue",
    "BuildScheduler",
    "compute_delay",
    "should_schedule",
    "PackageService",
    "clean_repo_url",
    "BuildPackageService",
    "BuildPackageResult",
]
