"""
Tests for Email Service.

Tests the Azure Communication Services email integration including:
- Service initialization
- Activation emails
- Feedback forwarding
- Error handling
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from azure.core.exceptions import HttpResponseError

from services.email_service import mask_email


def azure_client(result=None, error=None):
    """Mock aio EmailClient whose poller resolves to result."""
    poller = MagicMock()
    poller.result = AsyncMock(return_value=result or {"status": "Succeeded", "id": "msg-123"})
    client = MagicMock()
    client.begin_send = AsyncMock(return_value=poller, side_effect=error)
    client.close = AsyncMock()
    return client


class TestEmailService:
    """Tests for EmailService class."""

    @pytest.fixture
    def email_service(self):
        """Create a fresh EmailService instance."""
        from services.email_service import EmailService

        return EmailService()

    @pytest.fixture
    def configured(self, email_service):
        email_service._client = azure_client()
        email_service._sender_address = "noreply@dynamicstory.org"
        email_service._initialized = True
        return email_service

    async def test_initialize_without_credentials(self, email_service):
        """Test initialization without Azure credentials."""
        with patch("services.email_service.settings") as mock_settings:
            mock_settings.AZURE_COMMUNICATION_CONNECTION_STRING = None
            mock_settings.AZURE_EMAIL_SENDER_ADDRESS = None

            await email_service.initialize()

        assert email_service._client is None
        assert email_service._initialized is True
        assert email_service.is_available is False

    async def test_initialize_with_bad_connection_string(self, email_service):
        """Test a malformed connection string leaves the service unavailable."""
        with patch("services.email_service.settings") as mock_settings:
            mock_settings.AZURE_COMMUNICATION_CONNECTION_STRING = "not-a-connection-string"
            mock_settings.AZURE_EMAIL_SENDER_ADDRESS = "noreply@dynamicstory.org"
            with patch("services.email_service.EmailClient") as mock_client_cls:
                mock_client_cls.from_connection_string.side_effect = ValueError("bad")

                await email_service.initialize()

        assert email_service._initialized is True
        assert email_service.is_available is False

    async def test_skip_reinitialization(self, email_service):
        """Test that initialize() skips if already initialized."""
        email_service._initialized = True
        original_client = MagicMock()
        email_service._client = original_client

        await email_service.initialize()

        assert email_service._client is original_client

    async def test_is_available_with_client(self, configured):
        assert configured.is_available is True

    async def test_close(self, configured):
        client = configured._client

        await configured.close()

        client.close.assert_awaited_once()
        assert configured.is_available is False

    async def test_activation_unavailable(self, email_service):
        """Test activation mail returns False when service unavailable."""
        email_service._initialized = True

        result = await email_service.send_activation_email("user@example.com", "alice", "abc123")

        assert result is False

    async def test_activation_content(self, configured):
        """Test the activation mail carries the link and the bare ID."""
        with patch("services.email_service.settings") as mock_settings:
            mock_settings.ACTIVATION_URL = "https://dynamicstory.org/user/activate/"

            result = await configured.send_activation_email("user@example.com", "alice", "abc123")

        assert result is True
        message = configured._client.begin_send.await_args.args[0]
        assert message["senderAddress"] == "noreply@dynamicstory.org"
        assert message["recipients"]["to"] == [{"address": "user@example.com"}]
        assert message["content"]["subject"] == "Thanks for signing up for an account on DynamicStory.org!"
        body = message["content"]["plainText"]
        assert body.startswith("Hey alice,")
        assert "https://dynamicstory.org/user/activate/abc123" in body
        assert "Activation ID: abc123" in body
        assert "replyTo" not in message

    async def test_feedback_goes_to_inbox_with_reply_to(self, configured):
        with patch("services.email_service.settings") as mock_settings:
            mock_settings.FEEDBACK_EMAIL_ADDRESS = "contact@dynamicstory.org"

            result = await configured.send_feedback_email("alice", "alice@example.com", "Nice site")

        assert result is True
        message = configured._client.begin_send.await_args.args[0]
        assert message["recipients"]["to"] == [{"address": "contact@dynamicstory.org"}]
        assert message["replyTo"] == [{"address": "alice@example.com"}]
        assert message["content"]["subject"] == "DynamicStory feedback from alice"
        assert message["content"]["plainText"] == "Nice site"

    async def test_send_failure(self, configured):
        """Test handling of email send failure."""
        configured._client = azure_client(error=HttpResponseError("Send failed"))

        result = await configured.send_activation_email("user@example.com", "alice", "abc123")

        assert result is False

    async def test_send_not_succeeded(self, configured):
        configured._client = azure_client(result={"status": "Failed", "error": "rejected"})

        result = await configured.send_feedback_email("alice", "alice@example.com", "Nice site")

        assert result is False


def test_mask_email():
    assert mask_email("alice@example.com") == "ali***"
