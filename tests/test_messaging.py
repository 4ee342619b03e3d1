# ============================================================================
# MESSAGING TESTS
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Tests - Service Bus configuration and build dispatch
# PURPOSE: Verify env config, message shape and error categorization
# CREATED: 18 OCT 2026
# ============================================================================
"""
Messaging Tests

The Service Bus sender is mocked; nothing is sent.

Run with:
    pytest tests/test_messaging.py -v
"""

import asyncio
import json
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from azure.servicebus.exceptions import ServiceBusAuthorizationError, ServiceBusServerBusyError

from core.models.build_job import BuildReleaseMessage
from messaging import BuildJobPublisher, MessagingConfig


def _make_message():
    return BuildReleaseMessage(
        job_id="rel:com.example.widgets:1.0.0",
        package_name="com.example.widgets",
        version="1.0.0",
        tag="v1.0.0",
        commit="abc123",
        timeout_seconds=600,
    )


def _build_publisher():
    publisher = BuildJobPublisher(MessagingConfig(connection_string="Endpoint=sb://x/", build_queue="builds"))
    publisher._client = AsyncMock()
    publisher._sender = AsyncMock()
    return publisher


class TestConfig:
    def test_connection_string(self, monkeypatch):
        monkeypatch.delenv("USE_MANAGED_IDENTITY", raising=False)
        monkeypatch.setenv("RELEASE_SERVICEBUS_CONNECTION_STRING", "Endpoint=sb://x/")

        config = MessagingConfig.from_env()

        assert config.connection_string == "Endpoint=sb://x/"
        assert config.use_managed_identity is False
        assert config.build_queue == "build-release"

    def test_managed_identity_requires_fqdn(self, monkeypatch):
        monkeypatch.setenv("USE_MANAGED_IDENTITY", "true")
        monkeypatch.delenv("RELEASE_SERVICEBUS_FQDN", raising=False)

        with pytest.raises(ValueError, match="RELEASE_SERVICEBUS_FQDN"):
            MessagingConfig.from_env()

    def test_managed_identity(self, monkeypatch):
        monkeypatch.setenv("USE_MANAGED_IDENTITY", "true")
        monkeypatch.setenv("RELEASE_SERVICEBUS_FQDN", "relapp.servicebus.windows.net")

        config = MessagingConfig.from_env()

        assert config.use_managed_identity is True
        assert config.fully_qualified_namespace == "relapp.servicebus.windows.net"

    def test_missing_connection_raises(self, monkeypatch):
        monkeypatch.delenv("USE_MANAGED_IDENTITY", raising=False)
        monkeypatch.delenv("RELEASE_SERVICEBUS_CONNECTION_STRING", raising=False)

        with pytest.raises(ValueError):
            MessagingConfig.from_env()


class TestBuildMessage:
    def test_body_and_identity(self):
        sb_message = _build_publisher().build_message(_make_message())

        body = json.loads(str(sb_message))
        assert body["job_id"] == "rel:com.example.widgets:1.0.0"
        assert body["commit"] == "abc123"
        assert sb_message.message_id == "rel:com.example.widgets:1.0.0"
        assert sb_message.scheduled_enqueue_time_utc is None

    def test_scheduled(self):
        when = datetime(2026, 10, 18, 12, 5, tzinfo=timezone.utc)
        sb_message = _build_publisher().build_message(_make_message(), scheduled_at=when)
        assert sb_message.scheduled_enqueue_time_utc == when


class TestDispatch:
    def test_sends_one_message(self):
        publisher = _build_publisher()

        message_id = asyncio.run(publisher.dispatch_build(_make_message()))

        assert message_id == "rel:com.example.widgets:1.0.0"
        publisher._sender.send_messages.assert_awaited_once()

    def test_permanent_error_becomes_runtime_error(self):
        publisher = _build_publisher()
        publisher._sender.send_messages.side_effect = ServiceBusAuthorizationError(message="denied")

        with pytest.raises(RuntimeError, match="auth failed"):
            asyncio.run(publisher.dispatch_build(_make_message()))

    def test_transient_error_propagates(self):
        publisher = _build_publisher()
        publisher._sender.send_messages.side_effect = ServiceBusServerBusyError(message="busy")

        with pytest.raises(ServiceBusServerBusyError):
            asyncio.run(publisher.dispatch_build(_make_message()))
        assert publisher._sender.send_messages.await_count == 1
