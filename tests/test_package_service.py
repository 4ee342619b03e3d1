# ============================================================================
# PACKAGE SERVICE TESTS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Tests - Package definition loading
# PURPOSE: Verify YAML loading, validation, caching and repo URL cleaning
# CREATED: 18 OCT 2026
# ============================================================================
"""
PackageService Tests

Run with:
    pytest tests/test_package_service.py -v
"""

import pytest

from services.package_service import PackageService, clean_repo_url


# ============================================================================
# LOAD
# ============================================================================

class TestLoad:
    def test_loads_camel_case_yaml(self, tmp_path):
        (tmp_path / "com.example.widgets.yml").write_text(
            "name: com.example.widgets\n"
            "repoUrl: https://github.com/example/widgets\n"
            "displayName: Widgets\n"
            "gitTagPrefix: v\n"
            "gitTagIgnore: -master$\n"
            "licenseName: MIT\n"
        )

        pkg = PackageService(tmp_path).load("com.example.widgets")

        assert pkg.name == "com.example.widgets"
        assert pkg.repo_url == "https://github.com/example/widgets"
        assert pkg.display_name == "Widgets"
        assert pkg.git_tag_prefix == "v"
        assert pkg.git_tag_ignore == "-master$"

    def test_accepts_yaml_suffix_and_missing_name(self, tmp_path):
        (tmp_path / "com.example.gadgets.yaml").write_text(
            "repo_url: git@github.com:example/gadgets.git\n"
        )

        pkg = PackageService(tmp_path).load("com.example.gadgets")

        assert pkg.name == "com.example.gadgets"
        assert pkg.git_tag_prefix is None
        assert pkg.git_tag_ignore is None

    def test_blank_optional_values_are_unset(self, tmp_path):
        (tmp_path / "p.yml").write_text("repoUrl: https://x/y\ngitTagPrefix: ''\ngitTagIgnore:\n")

        pkg = PackageService(tmp_path).load("p")

        assert pkg.git_tag_prefix is None
        assert pkg.git_tag_ignore is None

    def test_missing_package_raises_key_error(self, tmp_path):
        with pytest.raises(KeyError):
            PackageService(tmp_path).load("com.example.nothing")

    def test_missing_repo_url_raises_value_error(self, tmp_path):
        (tmp_path / "p.yml").write_text("name: p\n")
        with pytest.raises(ValueError, match="Invalid package definition"):
            PackageService(tmp_path).load("p")

    def test_invalid_ignore_pattern_raises_value_error(self, tmp_path):
        (tmp_path / "p.yml").write_text("repoUrl: https://x/y\ngitTagIgnore: '[a-'\n")
        with pytest.raises(ValueError):
            PackageService(tmp_path).load("p")

    def test_non_mapping_raises_value_error(self, tmp_path):
        (tmp_path / "p.yml").write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            PackageService(tmp_path).load("p")

    def test_name_mismatch_raises_value_error(self, tmp_path):
        (tmp_path / "p.yml").write_text("name: q\nrepoUrl: https://x/y\n")
        with pytest.raises(ValueError, match="mismatch"):
            PackageService(tmp_path).load("p")

    def test_definitions_are_cached(self, tmp_path):
        path = tmp_path / "p.yml"
        path.write_text("repoUrl: https://x/first\n")
        service = PackageService(tmp_path)

        first = service.load("p")
        path.write_text("repoUrl: https://x/second\n")

        assert service.load("p") is first
        service.clear_cache()
        assert service.load("p").repo_url == "https://x/second"

    def test_list_packages(self, tmp_path):
        (tmp_path / "b.yaml").write_text("repoUrl: https://x/b\n")
        (tmp_path / "a.yml").write_text("repoUrl: https://x/a\n")
        (tmp_path / "notes.txt").write_text("ignored")

        assert PackageService(tmp_path).list_packages() == ["a", "b"]


# ============================================================================
# REPO URL
# ============================================================================

class TestCleanRepoUrl:
    @pytest.mark.parametrize("url,https,git", [
        ("https://github.com/owner/repo",
         "https://github.com/owner/repo", "https://github.com/owner/repo.git"),
        ("https://github.com/owner/repo.git",
         "https://github.com/owner/repo", "https://github.com/owner/repo.git"),
        ("git@github.com:owner/repo.git",
         "https://github.com/owner/repo", "https://github.com/owner/repo.git"),
        ("git@gitlab.com:group/sub/repo",
         "https://gitlab.com/group/sub/repo", "https://gitlab.com/group/sub/repo.git"),
        ("ssh://git@github.com/owner/repo.git",
         "https://github.com/owner/repo", "https://github.com/owner/repo.git"),
        ("https://github.com/owner/repo/",
         "https://github.com/owner/repo", "https://github.com/owner/repo.git"),
    ])
    def test_formats(self, url, https, git):
        assert clean_repo_url(url, "https") == https
        assert clean_repo_url(url, "git") == git

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            clean_repo_url("https://github.com/owner/repo", "svn")
