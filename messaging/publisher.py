# ============================================================================
# BUILD JOB PUBLISHER
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Service Bus build dispatch
# PURPOSE: Send build-release messages, optionally scheduled for later
# CREATED: 18 OCT 2026
# ============================================================================
"""
Build Job Publisher

Sends build-release messages to Azure Service Bus. A delayed job is sent
as a scheduled message so the broker holds it until its start time.

No retries: permanent failures are raised as RuntimeError, transient
Service Bus errors propagate to the caller unchanged.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from azure.servicebus.aio import ServiceBusClient, ServiceBusSender
from azure.servicebus import ServiceBusMessage
from azure.servicebus.exceptions import (
    MessageSizeExceededError,
    MessagingEntityNotFoundError,
    ServiceBusAuthenticationError,
    ServiceBusAuthorizationError,
    ServiceBusQuotaExceededError,
)

from core.models import BuildReleaseMessage
from .config import MessagingConfig

logger = logging.getLogger(__name__)

class BuildJobPublisher:
    """Publisher for dispatching build jobs to Service Bus."""

    def __init__(self, config: MessagingConfig):
        """
        Initialize build job publisher.

        Args:
            config: Messaging configuration
        """
        self.config = config
        self._client: Optional[ServiceBusClient] = None
        self._sender: Optional[ServiceBusSender] = None

    async def connect(self) -> None:
        """Establish connection to Service Bus."""
        if self._client is not None:
            return

        if self.config.use_managed_identity:
            from azure.identity.aio import ManagedIdentityCredential

            if self.config.managed_identity_client_id:
                credential = ManagedIdentityCredential(
                    client_id=self.config.managed_identity_client_id
                )
            else:
                credential = ManagedIdentityCredential()

            self._client = ServiceBusClient(
                fully_qualified_namespace=self.config.fully_qualified_namespace,
                credential=credential,
            )
            logger.info(
                f"Connecting to Service Bus via managed identity: "
                f"{self.config.fully_qualified_namespace}"
            )
        else:
            self._client = ServiceBusClient.from_connection_string(
                self.config.connection_string
            )
            logger.info("Connecting to Service Bus via connection string")

        self._sender = self._client.get_queue_sender(
            queue_name=self.config.build_queue
        )
        logger.info(f"Connected to Service Bus queue: {self.config.build_queue}")

    async def close(self) -> None:
        """Close connection to Service Bus."""
        if self._sender:
            await self._sender.close()
            self._sender = None

        if self._client:
            await self._client.close()
            self._client = None

        logger.info("Service Bus connection closed")

    def build_message(
        self,
        message: BuildReleaseMessage,
        scheduled_at: Optional[datetime] = None,
    ) -> ServiceBusMessage:
        """Wrap a BuildReleaseMessage for the wire."""
        sb_message = ServiceBusMessage(
            body=message.model_dump_json(),
            content_type="application/json",
            message_id=message.job_id,
            subject="build-release",
            application_properties={
                "job_id": message.job_id,
                "package_name": message.package_name,
                "version": message.version,
            },
        )
        sb_message.time_to_live = timedelta(seconds=message.timeout_seconds * 2)
        if scheduled_at is not None:
            sb_message.scheduled_enqueue_time_utc = scheduled_at
        return sb_message

    async def dispatch_build(
        self,
        message: BuildReleaseMessage,
        scheduled_at: Optional[datetime] = None,
    ) -> str:
        """
        Send one build-release message.

        Args:
            message: Build request
            scheduled_at: Aware UTC time to enqueue at; None sends immediately

        Returns:
            The message id (the job id)

        Raises:
            RuntimeError: Permanent Service Bus failure
        """
        if self._sender is None:
            await self.connect()

        sb_message = self.build_message(message, scheduled_at)
        queue_name = self.config.build_queue

        try:
            await self._sender.send_messages(sb_message)
        except (ServiceBusAuthenticationError, ServiceBusAuthorizationError) as e:
            logger.error(f"Auth failed for {queue_name}: {e}")
            raise RuntimeError(f"Service Bus auth failed: {e}") from e
        except MessageSizeExceededError as e:
            logger.error(f"Message too large for {queue_name}: {e}")
            raise RuntimeError(f"Message exceeds 256KB limit: {e}") from e
        except MessagingEntityNotFoundError as e:
            logger.error(f"Queue '{queue_name}' not found: {e}")
            raise RuntimeError(f"Queue '{queue_name}' does not exist: {e}") from e
        except ServiceBusQuotaExceededError as e:
            logger.error(f"Service Bus quota exceeded: {e}")
            raise RuntimeError(f"Service Bus quota exceeded: {e}") from e

        when = scheduled_at.isoformat() if scheduled_at else "now"
        logger.info(f"Dispatched build {message.job_id} to {queue_name} (enqueue at {when})")
        return message.job_id

    async def __aenter__(self) -> "BuildJobPublisher":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
