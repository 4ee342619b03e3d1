# ============================================================================
# MESSAGING CONFIGURATION
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Service Bus configuration
# PURPOSE: Centralize messaging configuration for build dispatch
# CREATED: 18 OCT 2026
# ============================================================================
"""
Messaging Configuration

Configuration for the Azure Service Bus namespace that carries
build-release messages. Supports both connection string and managed
identity authentication.
"""

import os
from dataclasses import dataclass
from typing import Optional

from core.config import get_defaults


@dataclass
class MessagingConfig:
    """
    Configuration for Azure Service Bus messaging.

    Loaded from environment variables.
    """
    # Connection - either connection_string OR fully_qualified_namespace
    connection_string: Optional[str] = None
    fully_qualified_namespace: Optional[str] = None

    # Managed identity settings
    use_managed_identity: bool = False
    managed_identity_client_id: Optional[str] = None

    # Queue receiving build-release messages
    build_queue: str = "build-release"

    @classmethod
    def from_env(cls) -> "MessagingConfig":
        """
        Load configuration from environment variables.

        For connection string auth:
            RELEASE_SERVICEBUS_CONNECTION_STRING: Service Bus connection string

        For managed identity auth:
            USE_MANAGED_IDENTITY: Set to "true" to use managed identity
            RELEASE_SERVICEBUS_FQDN: Fully qualified namespace (e.g., relapp.servicebus.windows.net)
            AZURE_CLIENT_ID: Optional client ID for user-assigned managed identity

        Common:
            BUILD_RELEASE_QUEUE: Build queue name (default: build-release)
        """
        build_queue = get_defaults().build_job.queue_name

        use_mi = os.environ.get("USE_MANAGED_IDENTITY", "").lower() == "true"

        if use_mi:
            fqdn = os.environ.get("RELEASE_SERVICEBUS_FQDN")
            if not fqdn:
                raise ValueError(
                    "RELEASE_SERVICEBUS_FQDN required when USE_MANAGED_IDENTITY=true"
                )
            return cls(
                use_managed_identity=True,
                fully_qualified_namespace=fqdn,
                managed_identity_client_id=os.environ.get("AZURE_CLIENT_ID"),
                build_queue=build_queue,
            )

        connection_string = os.environ.get("RELEASE_SERVICEBUS_CONNECTION_STRING")
        if not connection_string:
            raise ValueError(
                "RELEASE_SERVICEBUS_CONNECTION_STRING required (or set USE_MANAGED_IDENTITY=true)"
            )
        return cls(
            connection_string=connection_string,
            build_queue=build_queue,
        )

    @classmethod
    def is_configured(cls) -> bool:
        """Whether the environment names a Service Bus namespace at all."""
        return bool(
            os.environ.get("RELEASE_SERVICEBUS_CONNECTION_STRING")
            or os.environ.get("RELEASE_SERVICEBUS_FQDN")
        )
