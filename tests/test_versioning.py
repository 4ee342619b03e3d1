# ============================================================================
# VERSION PARSING TESTS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Tests - Semantic version extraction
# PURPOSE: Verify raw tag -> version mapping
# CREATED: 18 OCT 2026
# ============================================================================
"""
Version Parsing Tests

Run with:
    pytest tests/test_versioning.py -v
"""

import pytest

from core.versioning import get_version_from_tag, parse_semver, strip_tag_decorations


@pytest.mark.parametrize("tag,expected", [
    ("1.0.2", "1.0.2"),
    ("v1.0.2", "1.0.2"),
    ("V1.0.2", "1.0.2"),
    ("upm/1.0.2", "1.0.2"),
    ("1.0.2-upm", "1.0.2"),
    ("1.0.2_upm", "1.0.2"),
    ("releases/0.8.1-preview", "0.8.1-preview"),
    ("0.8.0-preview", "0.8.0-preview"),
    ("1.0.2-master", "1.0.2-master"),
    ("2.0.0-rc.1+build.5", "2.0.0-rc.1+build.5"),
    ("patch", None),
    ("1.0", None),
    ("01.0.0", None),
    ("version-1.0.0", None),
    ("", None),
    (None, None),
])
def test_get_version_from_tag(tag, expected):
    assert get_version_from_tag(tag) == expected


def test_strip_keeps_v_inside_words():
    assert strip_tag_decorations("very") == "very"


def test_parse_semver_parts():
    assert parse_semver("1.2.3-beta.1+sha.abc") == (1, 2, 3, "beta.1", "sha.abc")
    assert parse_semver("1.2.3") == (1, 2, 3, None, None)
    assert parse_semver("1.2") is None
