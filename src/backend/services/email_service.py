"""
Email Service using Azure Communication Services.

Handles:
- Account activation emails
- Feedback forwarding to the team inbox
"""

from typing import Optional

import structlog
from azure.communication.email.aio import EmailClient
from azure.core.exceptions import AzureError

from core.config import settings

logger = structlog.get_logger(__name__)


def mask_email(address: str) -> str:
    return address[:3] + "***"


class EmailService:
    """
    Email service using Azure Communication Services.

    Sending never raises: failures are logged and reported as False so the
    caller decides whether they matter.
    """

    def __init__(self):
        self._client: Optional[EmailClient] = None
        self._initialized = False
        self._sender_address: Optional[str] = None

    async def initialize(self) -> None:
        """Initialize the Azure Email client."""
        if self._initialized:
            return

        connection_string = settings.AZURE_COMMUNICATION_CONNECTION_STRING
        self._sender_address = settings.AZURE_EMAIL_SENDER_ADDRESS

        if not connection_string or not self._sender_address:
            logger.warning(
                "email_service_not_configured",
                has_connection_string=bool(connection_string),
                has_sender_address=bool(self._sender_address),
            )
            self._initialized = True
            return

        try:
            self._client = EmailClient.from_connection_string(connection_string)
            logger.info("email_service_initialized")
        except ValueError as e:
            logger.error("email_service_init_failed", error=str(e))
        self._initialized = True

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
        self._initialized = False

    @property
    def is_available(self) -> bool:
        """Check if email service is available."""
        return self._client is not None and self._sender_address is not None

    async def send_activation_email(
        self,
        to_email: str,
        username: str,
        activation_id: str,
    ) -> bool:
        """
        Send the account activation email.

        Args:
            to_email: Recipient email address
            username: The new user's name
            activation_id: The ID that activates the account

        Returns:
            True if sent successfully
        """
        await self.initialize()

        if not self.is_available:
            logger.warning(
                "email_service_unavailable",
                action="activation",
                to_email=mask_email(to_email),
            )
            return False

        url = settings.ACTIVATION_URL
        subject = "Thanks for signing up for an account on DynamicStory.org!"
        plain_text = (
            f"Hey {username},\n\n"
            "Welcome to DynamicStory.org! You are awesome!\n\n"
            f"Click on the following URL to activate your account: {url}{activation_id}\n\n"
            f"Alternatively, you can visit {url} and type in the following Activation ID when asked:\n"
            f"Activation ID: {activation_id}\n\n"
            "The DynamicStory Team"
        )

        return await self._send_email(
            to_email=to_email,
            subject=subject,
            plain_text=plain_text,
        )

    async def send_feedback_email(
        self,
        username: str,
        reply_to: str,
        body: str,
    ) -> bool:
        """Forward a user's feedback to the team inbox, replying to the user."""
        await self.initialize()

        if not self.is_available:
            logger.warning("email_service_unavailable", action="feedback")
            return False

        return await self._send_email(
            to_email=settings.FEEDBACK_EMAIL_ADDRESS,
            subject=f"DynamicStory feedback from {username}",
            plain_text=body,
            reply_to=reply_to,
        )

    async def _send_email(
        self,
        to_email: str,
        subject: str,
        plain_text: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """
        Internal method to send an email.

        Args:
            to_email: Recipient address
            subject: Email subject
            plain_text: Plain text body
            reply_to: Optional Reply-To address

        Returns:
            True if sent successfully
        """
        if not self._client or not self._sender_address:
            return False

        message = {
            "senderAddress": self._sender_address,
            "recipients": {
                "to": [{"address": to_email}],
            },
            "content": {
                "subject": subject,
                "plainText": plain_text,
            },
        }
        if reply_to:
            message["replyTo"] = [{"address": reply_to}]

        try:
            poller = await self._client.begin_send(message)
            result = await poller.result()
        except AzureError as e:
            logger.error("email_send_error", error=str(e), to=mask_email(to_email))
            return False

        if result["status"] == "Succeeded":
            logger.info(
                "email_sent",
                to=mask_email(to_email),
                subject=subject,
                message_id=result.get("id"),
            )
            return True

        logger.error(
            "email_send_failed",
            status=result["status"],
            error=result.get("error"),
        )
        return False


# Global instance
email_service = EmailService()


async def get_email_service() -> EmailService:
    """Dependency for getting email service."""
    await email_service.initialize()
    return email_service
