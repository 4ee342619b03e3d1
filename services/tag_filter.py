# ============================================================================
# TAG FILTER
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Domain logic - Remote tag selection
# PURPOSE: Reduce raw remote tags to one canonical tag per version
# CREATED: 18 OCT 2026
# ============================================================================
"""
Tag Filter

Pure transform from the tags a remote reports to the tags worth
building. Each step is a plain function over immutable tuples:

    1. filter_by_prefix    raw tag starts with gitTagPrefix
    2. filter_by_version   raw tag yields a semantic version and both fit
                           the release columns
    3. filter_by_ignore    raw tag does not match gitTagIgnore
    4. partition_upm_tags  'upm/...' and '..._upm' / '...-upm' tags first
    5. dedupe_by_version   first tag per version wins, UPM tags always kept
    6. reverse             valid_tags is the reverse of construction order

UPM tags are kept even when two of them share a version; only non-UPM
tags are deduplicated.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from core.models.release import MAX_TAG_LENGTH, MAX_VERSION_LENGTH
from core.models.remote_tag import RemoteTag
from core.versioning import get_version_from_tag

VersionParser = Callable[[str], Optional[str]]
Tags = Tuple[RemoteTag, ...]

UPM_TAG_RE = re.compile(r"(^upm/|(_|-)upm$)", re.IGNORECASE)


@dataclass(frozen=True)
class TagFilterResult:
    """Outcome of filtering one package's remote tags."""
    valid_tags: Tags
    invalid_tags: Tags


# ============================================================================
# STEPS
# ============================================================================

def filter_by_prefix(tags: Iterable[RemoteTag], prefix: Optional[str]) -> Tags:
    """Keep tags whose raw name starts with prefix (case-sensitive)."""
    tags = tuple(tags)
    if not prefix:
        return tags
    return tuple(t for t in tags if t.tag.startswith(prefix))


def filter_by_version(
    tags: Iterable[RemoteTag],
    parse: VersionParser = get_version_from_tag,
) -> Tags:
    """Keep tags that carry a semantic version short enough to store."""
    kept = []
    for t in tags:
        if len(t.tag) > MAX_TAG_LENGTH:
            continue
        version = parse(t.tag)
        if version is not None and len(version) <= MAX_VERSION_LENGTH:
            kept.append(t)
    return tuple(kept)


def compile_ignore_pattern(pattern: str) -> "re.Pattern[str]":
    """
    Compile a gitTagIgnore pattern.

    Raises:
        ValueError: Pattern is not a valid regular expression
    """
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise ValueError(f"Invalid gitTagIgnore pattern '{pattern}': {e}") from e


def filter_by_ignore(tags: Iterable[RemoteTag], pattern: Optional[str]) -> Tags:
    """Drop tags whose raw name matches pattern anywhere, ignoring case."""
    tags = tuple(tags)
    if not pattern:
        return tags
    ignore_re = compile_ignore_pattern(pattern)
    return tuple(t for t in tags if not ignore_re.search(t.tag))


def is_upm_tag(tag: str) -> bool:
    return UPM_TAG_RE.search(tag) is not None


def partition_upm_tags(tags: Iterable[RemoteTag]) -> Tuple[Tags, Tags]:
    """
    Split tags into (upm_tags, other_tags), both in source order.
    """
    upm, other = [], []
    for t in tags:
        (upm if is_upm_tag(t.tag) else other).append(t)
    return tuple(upm), tuple(other)


def dedupe_by_version(
    upm_tags: Iterable[RemoteTag],
    other_tags: Iterable[RemoteTag],
    parse: VersionParser = get_version_from_tag,
) -> Tags:
    """
    Keep every UPM tag, then each other tag whose version is not yet taken.

    Returns tags in construction order: UPM tags first, then the
    surviving other tags in source order.
    """
    selected = list(upm_tags)
    seen = {parse(t.tag) for t in selected}
    for t in other_tags:
        version = parse(t.tag)
        if version not in seen:
            seen.add(version)
            selected.append(t)
    return tuple(selected)


def select_valid_tags(
    remote_tags: Iterable[RemoteTag],
    git_tag_ignore: Optional[str] = None,
    git_tag_prefix: Optional[str] = None,
    parse: VersionParser = get_version_from_tag,
) -> Tags:
    """Steps 1-5: valid tags in construction order."""
    tags = filter_by_prefix(remote_tags, git_tag_prefix)
    tags = filter_by_version(tags, parse)
    tags = filter_by_ignore(tags, git_tag_ignore)
    upm_tags, other_tags = partition_upm_tags(tags)
    return dedupe_by_version(upm_tags, other_tags, parse)


# ============================================================================
# FILTER
# ============================================================================

class TagFilter:
    """Select the canonical tag per version from a remote's tags."""

    def __init__(self, parse: VersionParser = get_version_from_tag):
        self.parse = parse

    def filter(
        self,
        remote_tags: Iterable[RemoteTag],
        git_tag_ignore: Optional[str] = None,
        git_tag_prefix: Optional[str] = None,
    ) -> TagFilterResult:
        """
        Split remote tags into valid and invalid tags.

        valid_tags is the reverse of construction order. invalid_tags
        holds every remote tag not selected, in source order.

        Raises:
            ValueError: git_tag_ignore is not a valid regular expression
        """
        remote_tags = tuple(remote_tags)
        selected = select_valid_tags(
            remote_tags,
            git_tag_ignore=git_tag_ignore,
            git_tag_prefix=git_tag_prefix,
            parse=self.parse,
        )
        valid_tags = tuple(reversed(selected))
        valid_set = set(valid_tags)
        invalid_tags = tuple(t for t in remote_tags if t not in valid_set)
        return TagFilterResult(valid_tags=valid_tags, invalid_tags=invalid_tags)


__all__ = [
    "TagFilter",
    "TagFilterResult",
    "filter_by_prefix",
    "filter_by_version",
    "filter_by_ignore",
    "compile_ignore_pattern",
    "partition_upm_tags",
    "dedupe_by_version",
    "select_valid_tags",
    "is_upm_tag",
]
