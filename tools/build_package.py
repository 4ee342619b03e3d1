#!/usr/bin/env python3
# ============================================================================
# BUILD PACKAGE TOOL
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Tool - Reconcile one package from the command line
# PURPOSE: Thin driver around BuildPackageService
# CREATED: 18 OCT 2026
# ============================================================================
"""
Reconcile one package's releases and schedule its missing builds.

Usage:
    python tools/build_package.py com.example.widgets

    # Use another packages directory
    python tools/build_package.py com.example.widgets --packages-dir ./registry

    # Reconcile releases, report build jobs without queueing them
    python tools/build_package.py com.example.widgets --dry-run

Requires:
    DATABASE_URL (or POSTGRES_* env vars)
    RELEASE_SERVICEBUS_CONNECTION_STRING (or RELEASE_SERVICEBUS_FQDN with
    USE_MANAGED_IDENTITY=true) unless --dry-run
"""

import argparse
import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.logging import configure_logging
from messaging import BuildJobPublisher, MessagingConfig
from repositories import DatabasePool
from services import BuildPackageResult, BuildPackageService, PackageService

logger = logging.getLogger("tools.build_package")


async def run(name: str, packages_dir: str = None, dry_run: bool = False) -> BuildPackageResult:
    """Run reconciliation for one package with pool and publisher lifecycles owned here."""
    package_service = PackageService(packages_dir)

    async with DatabasePool() as pool:
        if dry_run:
            service = BuildPackageService(pool, publisher=None, package_service=package_service)
            return await service.build_package(name)

        async with BuildJobPublisher(MessagingConfig.from_env()) as publisher:
            service = BuildPackageService(pool, publisher=publisher, package_service=package_service)
            return await service.build_package(name)


def main():
    parser = argparse.ArgumentParser(
        description="Reconcile a package's releases and schedule build jobs",
    )
    parser.add_argument("name", help="Package name")
    parser.add_argument(
        "--packages-dir",
        type=str,
        default=None,
        help="Directory of package YAML files (default: $PACKAGES_DIR or ./packages)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Reconcile releases but only report build jobs; nothing is queued",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else "INFO")

    try:
        result = asyncio.run(run(args.name, args.packages_dir, args.dry_run))
    except Exception:
        logger.exception(f"build_package failed for {args.name}")
        sys.exit(1)

    print(
        f"{result.package_name}: {result.valid_tags} valid tags, "
        f"{result.invalid_tags} invalid tags, {result.releases} releases, "
        f"{result.jobs_enqueued} jobs enqueued"
    )


if __name__ == "__main__":
    main()
