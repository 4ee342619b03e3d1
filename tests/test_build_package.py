# ============================================================================
# BUILD PACKAGE SERVICE TESTS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Tests - End-to-end flow for one package
# PURPOSE: Verify orchestration order, no-op path and error propagation
# CREATED: 18 OCT 2026
# ============================================================================
"""
BuildPackageService Tests

Collaborators are replaced with mocks after construction. No database,
no git, no Service Bus.

Run with:
    pytest tests/test_build_package.py -v
"""

import asyncio
import logging
import pytest
from unittest.mock import AsyncMock, MagicMock

from core.models.package import PackageDefinition
from core.models.release import Release
from core.models.remote_tag import RemoteTag
from infrastructure.git import GitCommandError
from services.build_package import BuildPackageService
from services.tag_filter import TagFilter


PKG = "com.example.widgets"


# ============================================================================
# HELPERS
# ============================================================================

def _make_package(**kwargs):
    data = {"name": PKG, "repoUrl": "git@github.com:example/widgets.git"}
    data.update(kwargs)
    return PackageDefinition(**data)


def _build_service(package=None, remote_tags=()):
    """Build a BuildPackageService with all collaborators mocked except TagFilter."""
    pool = MagicMock()
    svc = BuildPackageService(pool)

    svc.package_service = MagicMock()
    svc.package_service.load.return_value = package or _make_package()
    svc.tag_lister = AsyncMock()
    svc.tag_lister.list_remote_tags.return_value = list(remote_tags)
    svc.tag_filter = TagFilter()
    svc.extra_repo = AsyncMock()
    svc.reconciler = AsyncMock()
    svc.scheduler = AsyncMock()

    async def _reconcile(name, tags):
        return [Release(package_name=name, version=t.tag, tag=t.tag, commit=t.commit) for t in tags]

    svc.reconciler.reconcile.side_effect = _reconcile
    svc.scheduler.schedule.return_value = []
    return svc


# ============================================================================
# FLOW
# ============================================================================

class TestBuildPackage:
    def test_full_flow(self):
        tags = [RemoteTag(tag="1.0.1", commit="b"), RemoteTag(tag="patch", commit="p"),
                RemoteTag(tag="1.0.0", commit="a")]
        svc = _build_service(remote_tags=tags)
        svc.scheduler.schedule.return_value = [MagicMock(), MagicMock()]

        result = asyncio.run(svc.build_package(PKG))

        svc.package_service.load.assert_called_once_with(PKG)
        svc.tag_lister.list_remote_tags.assert_awaited_once_with(
            "https://github.com/example/widgets.git"
        )
        svc.extra_repo.set_invalid_tags.assert_awaited_once_with(
            PKG, (RemoteTag(tag="patch", commit="p"),)
        )
        name, valid = svc.reconciler.reconcile.await_args.args
        assert name == PKG
        assert list(valid) == [RemoteTag(tag="1.0.0", commit="a"), RemoteTag(tag="1.0.1", commit="b")]

        releases = svc.scheduler.schedule.await_args.args[0]
        assert [r.version for r in releases] == ["1.0.0", "1.0.1"]

        assert result.package_name == PKG
        assert result.valid_tags == 2
        assert result.invalid_tags == 1
        assert result.releases == 2
        assert result.jobs_enqueued == 2

    def test_package_filters_are_applied(self):
        tags = [RemoteTag(tag="v1.0.0", commit="a"), RemoteTag(tag="1.0.1", commit="b"),
                RemoteTag(tag="v1.0.2-master", commit="c")]
        svc = _build_service(
            package=_make_package(gitTagPrefix="v", gitTagIgnore="-MASTER$"),
            remote_tags=tags,
        )

        asyncio.run(svc.build_package(PKG))

        _, valid = svc.reconciler.reconcile.await_args.args
        assert list(valid) == [RemoteTag(tag="v1.0.0", commit="a")]

    def test_no_valid_tags_still_overwrites_invalid_tags(self, caplog):
        tags = [RemoteTag(tag="nightly", commit="n")]
        svc = _build_service(remote_tags=tags)

        with caplog.at_level(logging.INFO):
            result = asyncio.run(svc.build_package(PKG))

        svc.extra_repo.set_invalid_tags.assert_awaited_once_with(PKG, tuple(tags))
        svc.reconciler.reconcile.assert_not_awaited()
        svc.scheduler.schedule.assert_not_awaited()
        assert result.valid_tags == 0
        assert result.releases == 0
        assert "no valid tags found" in caplog.text

    def test_empty_remote_clears_invalid_tags(self):
        svc = _build_service(remote_tags=[])

        asyncio.run(svc.build_package(PKG))

        svc.extra_repo.set_invalid_tags.assert_awaited_once_with(PKG, ())


# ============================================================================
# ERRORS
# ============================================================================

class TestErrors:
    def test_unknown_package_raises_key_error(self):
        svc = _build_service()
        svc.package_service.load.side_effect = KeyError(PKG)

        with pytest.raises(KeyError):
            asyncio.run(svc.build_package(PKG))
        svc.tag_lister.list_remote_tags.assert_not_awaited()

    def test_git_failure_propagates(self):
        svc = _build_service()
        svc.tag_lister.list_remote_tags.side_effect = GitCommandError(["git", "ls-remote"], 128, "fatal")

        with pytest.raises(GitCommandError):
            asyncio.run(svc.build_package(PKG))
        svc.extra_repo.set_invalid_tags.assert_not_awaited()

    def test_store_failure_aborts_before_scheduling(self):
        svc = _build_service(remote_tags=[RemoteTag(tag="1.0.0", commit="a")])
        svc.reconciler.reconcile.side_effect = ConnectionError("database unavailable")

        with pytest.raises(ConnectionError):
            asyncio.run(svc.build_package(PKG))
        svc.scheduler.schedule.assert_not_awaited()


# ============================================================================
# WIRING
# ============================================================================

class TestWiring:
    def test_release_service_uses_scheduler_job_key(self):
        svc = BuildPackageService(MagicMock())
        assert svc.reconciler.release_service.job_key == svc.scheduler.job_config.key

    def test_queue_without_publisher(self):
        svc = BuildPackageService(MagicMock())
        assert svc.scheduler.queue.publisher is None
