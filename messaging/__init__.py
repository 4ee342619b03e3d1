# ============================================================================
# MESSAGING MODULE
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Azure Service Bus integration
# PURPOSE: Dispatch build-release jobs to build workers
# CREATED: 18 OCT 2026
# ============================================================================
"""
Messaging Module

Provides Azure Service Bus integration for build job dispatch.

Usage:
    from messaging import BuildJobPublisher, MessagingConfig

    async with BuildJobPublisher(MessagingConfig.from_env()) as publisher:
        await publisher.dispatch_build(message, scheduled_at=when)
"""

from .publisher import BuildJobPublisher
from .config import MessagingConfig

__all__ = [
    "BuildJobPublisher",
    "MessagingConfig",
]
