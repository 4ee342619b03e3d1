# ============================================================================
# VERSION PARSING
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Semantic version extraction from raw git tags
# PURPOSE: Map a raw tag ('v1.0.2', 'upm/1.0.2', 'releases/0.8.1-preview')
#          to a normalised SemVer 2.0 string, or None
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Version Parsing

Pure functions, no I/O. A tag yields a version when, after removing
decorations, what remains is a complete SemVer 2.0 version:

    releases/0.8.1-preview  -> 0.8.1-preview
    upm/1.0.2               -> 1.0.2
    v1.0.2                  -> 1.0.2
    1.0.2-upm               -> 1.0.2
    1.0.2-master            -> 1.0.2-master
    patch                   -> None
"""

import re
from typing import Optional, Tuple

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# Decorations removed before validation
_UPM_SUFFIX_RE = re.compile(r"[_-]upm$", re.IGNORECASE)
_V_PREFIX_RE = re.compile(r"^[vV](?=\d)")


def strip_tag_decorations(tag: str) -> str:
    """
    Remove path, 'v' prefix and UPM suffix from a raw tag.

    The version is the last path segment: 'releases/0.8.1-preview'
    and 'upm/1.0.2' both reduce to the bare version.
    """
    candidate = tag.strip().rsplit("/", 1)[-1]
    candidate = _UPM_SUFFIX_RE.sub("", candidate)
    return _V_PREFIX_RE.sub("", candidate)


def parse_semver(value: str) -> Optional[Tuple[int, int, int, Optional[str], Optional[str]]]:
    """Split a bare SemVer string into (major, minor, patch, prerelease, build)."""
    m = _SEMVER_RE.match(value)
    if m is None:
        return None
    return (int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4), m.group(5))


def get_version_from_tag(tag: Optional[str]) -> Optional[str]:
    """
    Extract the semantic version from a raw tag.

    Returns:
        Normalised version string, or None if the tag carries no
        valid semantic version.
    """
    if not tag:
        return None
    candidate = strip_tag_decorations(tag)
    if parse_semver(candidate) is None:
        return None
    return candidate


__all__ = ["get_version_from_tag", "parse_semver", "strip_tag_decorations"]
