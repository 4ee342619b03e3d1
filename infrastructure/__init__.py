# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Infrastructure - External process access
# PURPOSE: Talk to git remotes
# CREATED: 18 OCT 2026
# ============================================================================
"""
Infrastructure module for the release reconciler.

Provides:
- GitRemoteTagLister: List (tag, commit) pairs of a remote repository
- GitCommandError: Raised when git fails

Usage:
    from infrastructure import GitRemoteTagLister

    tags = await GitRemoteTagLister().list_remote_tags(url)
"""

from infrastructure.git import (
    GitCommandError,
    GitRemoteTagLister,
    parse_ls_remote_tags,
    run_git,
)

__all__ = [
    "GitCommandError",
    "GitRemoteTagLister",
    "parse_ls_remote_tags",
    "run_git",
]
