# ============================================================================
# RELEASE RECONCILER
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain logic - Remote tags vs persisted releases
# PURPOSE: Evict stale failed releases, materialize missing ones
# CREATED: 18 OCT 2026
# ============================================================================
"""
ReleaseReconciler

Two sequential steps per package:

    A. evict_stale_failures   a FAILED release whose (tag, commit) is no
                              longer among the valid tags was built from a
                              moved or deleted tag; remove it
    B. materialize_releases   one release per valid tag, created if absent,
                              reused untouched if present

Step A always completes before step B. Store errors propagate.
"""

from typing import List, Sequence

from core.contracts import ReleaseState
from core.logging import ComponentType, get_logger
from core.models.release import Release
from core.models.remote_tag import RemoteTag
from core.versioning import get_version_from_tag
from repositories import ReleaseRepository
from services.release_service import ReleaseService
from services.tag_filter import VersionParser

logger = get_logger(__name__, ComponentType.SERVICE)


class ReleaseReconciler:
    """Diff valid remote tags against the release store."""

    def __init__(
        self,
        release_repo: ReleaseRepository,
        release_service: ReleaseService,
        parse: VersionParser = get_version_from_tag,
    ):
        self.release_repo = release_repo
        self.release_service = release_service
        self.parse = parse

    async def reconcile(
        self,
        package_name: str,
        valid_tags: Sequence[RemoteTag],
    ) -> List[Release]:
        """
        Bring the release store in line with valid_tags.

        Returns:
            One release per valid tag, in valid_tags order.
        """
        await self.evict_stale_failures(package_name, valid_tags)
        return await self.materialize_releases(package_name, valid_tags)

    async def evict_stale_failures(
        self,
        package_name: str,
        valid_tags: Sequence[RemoteTag],
    ) -> List[str]:
        """
        Remove failed releases whose (tag, commit) left the remote.

        Returns:
            Versions removed
        """
        releases = await self.release_repo.fetch_all(package_name)
        removed = []
        for release in releases:
            if release.state != ReleaseState.FAILED:
                continue
            if any(release.matches_tag(t.tag, t.commit) for t in valid_tags):
                continue
            logger.warning(
                f"Removing failed release {release.display_name}: "
                f"{release.tag}@{release.commit} no longer listed in remote tags"
            )
            await self.release_service.remove_release(package_name, release.version)
            removed.append(release.version)
        return removed

    async def materialize_releases(
        self,
        package_name: str,
        valid_tags: Sequence[RemoteTag],
    ) -> List[Release]:
        """Fetch or create the release of every valid tag."""
        releases = []
        for remote_tag in valid_tags:
            version = self.parse(remote_tag.tag)
            release = await self.release_repo.fetch_one(package_name, version)
            if release is None:
                release = await self.release_repo.save(
                    Release(
                        package_name=package_name,
                        version=version,
                        commit=remote_tag.commit,
                        tag=remote_tag.tag,
                    )
                )
            releases.append(release)
        return releases
