# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for release reconciliation.
"""

from core.config.defaults import (
    BuildJobDefaults,
    ReleasePolicyDefaults,
    PackageSourceDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
    parse_reason_list,
)

__all__ = [
    "BuildJobDefaults",
    "ReleasePolicyDefaults",
    "PackageSourceDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
    "parse_reason_list",
]
