# ============================================================================
# PACKAGE SERVICE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Service - Package definition loading
# PURPOSE: Load package definitions from YAML files, normalise repo URLs
# CREATED: 18 OCT 2026
# ============================================================================
"""
Package Service

Loads PackageDefinition objects from YAML files. One file per package:

    packages/
    ├── com.example.widgets.yml
    └── com.example.gadgets.yaml

Usage:
    service = PackageService("./packages")
    pkg = service.load("com.example.widgets")
    url = clean_repo_url(pkg.repo_url, "git")
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from core.config import get_defaults
from core.logging import ComponentType, get_logger
from core.models.package import PackageDefinition

logger = get_logger(__name__, ComponentType.SERVICE)

PACKAGE_FILE_SUFFIXES = (".yml", ".yaml")

_SCP_LIKE_RE = re.compile(r"^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>(?!//)[^\s]+)$")


def clean_repo_url(url: str, format: str = "https") -> str:
    """
    Normalise a repository URL.

    'git@github.com:owner/repo.git' -> 'https://github.com/owner/repo'

    Args:
        url: Repository URL as written in the package definition
        format: "https" for the browsable form, "git" for the cloneable
                form (https plus a '.git' suffix)
    """
    if format not in ("https", "git"):
        raise ValueError(f"Unknown repo url format: {format}")

    cleaned = url.strip().rstrip("/")

    m = _SCP_LIKE_RE.match(cleaned)
    if m and "://" not in cleaned:
        cleaned = f"https://{m.group('host')}/{m.group('path')}"
    elif cleaned.startswith(("git://", "http://", "ssh://")):
        rest = cleaned.split("://", 1)[1]
        rest = rest.split("@", 1)[-1]
        cleaned = f"https://{rest}"

    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]

    if format == "git":
        return f"{cleaned}.git"
    return cleaned


class PackageService:
    """
    Service for loading package definitions.

    Caches loaded definitions in memory.
    """

    def __init__(self, packages_dir: Optional[Union[str, Path]] = None):
        if packages_dir is None:
            packages_dir = get_defaults().package_source.packages_dir
        self.packages_dir = Path(packages_dir)
        self._cache: Dict[str, PackageDefinition] = {}

    def find_file(self, name: str) -> Optional[Path]:
        """Path of the YAML file defining name, if any."""
        for suffix in PACKAGE_FILE_SUFFIXES:
            path = self.packages_dir / f"{name}{suffix}"
            if path.is_file():
                return path
        return None

    def load(self, name: str) -> PackageDefinition:
        """
        Load a package definition by name.

        Raises:
            KeyError: No definition file for name
            ValueError: File is not a valid package definition
        """
        if name in self._cache:
            return self._cache[name]

        path = self.find_file(name)
        if path is None:
            raise KeyError(f"Package not found: {name} (searched {self.packages_dir})")

        logger.debug(f"Loading package definition: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Package definition must be a mapping: {path}")

        data.setdefault("name", name)
        try:
            pkg = PackageDefinition.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid package definition {path}: {e}") from e

        if pkg.name != name:
            raise ValueError(
                f"Package name mismatch in {path}: file declares '{pkg.name}'"
            )

        self._cache[name] = pkg
        return pkg

    def list_packages(self) -> List[str]:
        """Names of all package definition files, sorted."""
        if not self.packages_dir.is_dir():
            return []
        return sorted(
            p.stem for p in self.packages_dir.iterdir()
            if p.is_file() and p.suffix in PACKAGE_FILE_SUFFIXES
        )

    def clear_cache(self) -> None:
        self._cache.clear()
