# ============================================================================
# GIT REMOTE ACCESS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Infrastructure - Remote tag listing
# PURPOSE: List (tag, commit) pairs of a git remote via git ls-remote
# CREATED: 18 OCT 2026
# ============================================================================
"""
Git Remote Access

Lists the tags of a remote repository without cloning it:

    git ls-remote --tags <url>

Output lines are "<sha>\\trefs/tags/<name>". Annotated tags appear twice,
once for the tag object and once peeled ("<name>^{}") with the commit the
tag points at; the peeled commit wins.

Usage:
    lister = GitRemoteTagLister()
    tags = await lister.list_remote_tags("https://github.com/owner/repo.git")
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from core.config import get_defaults
from core.models.remote_tag import RemoteTag

logger = logging.getLogger(__name__)

TAG_REF_PREFIX = "refs/tags/"
PEELED_SUFFIX = "^{}"


class GitCommandError(RuntimeError):
    """A git command exited with a non-zero status or timed out."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str):
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(str(self))

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        detail = self.stderr.strip().splitlines()[-1] if self.stderr.strip() else ""
        message = f"{cmd_str} failed (exit {self.returncode})"
        return f"{message}: {detail}" if detail else message


def parse_ls_remote_tags(output: str) -> List[RemoteTag]:
    """
    Parse `git ls-remote --tags` output into RemoteTags.

    Keeps the order in which tag names first appear. Lines that are not
    tag refs are ignored.
    """
    order: List[str] = []
    commits: Dict[str, str] = {}
    peeled: Dict[str, str] = {}

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        sha, _, ref = line.partition("\t")
        if not ref.startswith(TAG_REF_PREFIX):
            continue
        name = ref[len(TAG_REF_PREFIX):]
        if name.endswith(PEELED_SUFFIX):
            name = name[: -len(PEELED_SUFFIX)]
            peeled[name] = sha
        else:
            commits[name] = sha
        if name not in order:
            order.append(name)

    return [RemoteTag(tag=name, commit=peeled.get(name) or commits[name]) for name in order]


async def run_git(args: Sequence[str], timeout: Optional[float] = None) -> Tuple[str, str]:
    """
    Run git with the given arguments.

    Returns:
        (stdout, stderr)

    Raises:
        GitCommandError: Non-zero exit, timeout, or git not executable
    """
    cmd = ["git", *args]
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise GitCommandError(cmd, -1, str(e)) from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise GitCommandError(cmd, -1, f"Command timed out after {timeout}s") from e

    out = stdout.decode("utf-8", errors="replace")
    err = stderr.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        raise GitCommandError(cmd, proc.returncode, err)
    return out, err


class GitRemoteTagLister:
    """Remote tag lister backed by the git executable."""

    def __init__(self, timeout: Optional[float] = None):
        if timeout is None:
            timeout = get_defaults().package_source.git_ls_remote_timeout
        self.timeout = timeout

    async def list_remote_tags(self, repo_url: str) -> List[RemoteTag]:
        """List the remote's tags in the order git reports them."""
        logger.debug(f"Listing remote tags of {repo_url}")
        stdout, _ = await run_git(["ls-remote", "--tags", repo_url], timeout=self.timeout)
        tags = parse_ls_remote_tags(stdout)
        logger.info(f"Found {len(tags)} remote tags at {repo_url}")
        return tags
