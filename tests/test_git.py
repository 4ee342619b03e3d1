# ============================================================================
# GIT REMOTE ACCESS TESTS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Tests - git ls-remote parsing and error reporting
# PURPOSE: Verify tag parsing, peeled commits and GitCommandError
# CREATED: 18 OCT 2026
# ============================================================================
"""
Git Remote Access Tests

Subprocess creation is patched; git is never executed.

Run with:
    pytest tests/test_git.py -v
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from core.models.remote_tag import RemoteTag
from infrastructure.git import GitCommandError, GitRemoteTagLister, parse_ls_remote_tags


LS_REMOTE_OUTPUT = (
    "1111111111111111111111111111111111111111\trefs/tags/1.0.0\n"
    "aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa\trefs/tags/1.0.1\n"
    "2222222222222222222222222222222222222222\trefs/tags/1.0.1^{}\n"
    "3333333333333333333333333333333333333333\trefs/tags/upm/1.0.1\n"
    "4444444444444444444444444444444444444444\trefs/heads/main\n"
    "\n"
)


def _make_process(stdout=b"", stderr=b"", returncode=0):
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.returncode = returncode
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class TestParse:
    def test_tags_in_first_seen_order(self):
        tags = parse_ls_remote_tags(LS_REMOTE_OUTPUT)
        assert [t.tag for t in tags] == ["1.0.0", "1.0.1", "upm/1.0.1"]

    def test_peeled_commit_wins(self):
        tags = parse_ls_remote_tags(LS_REMOTE_OUTPUT)
        assert tags[1] == RemoteTag(tag="1.0.1", commit="2" * 40)

    def test_lightweight_tag_uses_ref_commit(self):
        tags = parse_ls_remote_tags(LS_REMOTE_OUTPUT)
        assert tags[0].commit == "1" * 40

    def test_empty_output(self):
        assert parse_ls_remote_tags("") == []


class TestLister:
    def test_runs_ls_remote(self):
        proc = _make_process(stdout=LS_REMOTE_OUTPUT.encode())
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as create:
            tags = asyncio.run(
                GitRemoteTagLister(timeout=5).list_remote_tags("https://github.com/o/r.git")
            )

        assert len(tags) == 3
        args = create.await_args.args
        assert args == ("git", "ls-remote", "--tags", "https://github.com/o/r.git")

    def test_non_zero_exit_raises(self):
        proc = _make_process(stderr=b"fatal: repository not found\n", returncode=128)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(GitCommandError) as exc_info:
                asyncio.run(GitRemoteTagLister(timeout=5).list_remote_tags("https://x/y.git"))

        err = exc_info.value
        assert err.returncode == 128
        assert "repository not found" in err.stderr
        assert err.command[:3] == ("git", "ls-remote", "--tags")
        assert "exit 128" in str(err)
        assert isinstance(err, RuntimeError)

    def test_missing_git_raises(self):
        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("git"))):
            with pytest.raises(GitCommandError):
                asyncio.run(GitRemoteTagLister(timeout=5).list_remote_tags("https://x/y.git"))

    def test_default_timeout_from_config(self):
        assert GitRemoteTagLister().timeout == 60.0
