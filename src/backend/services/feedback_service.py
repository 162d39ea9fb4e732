"""
Feedback service.

Feedback is mailed to the team inbox and stored at the same time. Without
a working email transport feedback is refused outright.
"""

import asyncio
import html

import structlog

from core.errors import ServerError, document_should_exist
from repositories.provider import FeedbackRepositoryProtocol, UserRepositoryProtocol
from services.email_service import EmailService
from services.session_service import SessionManager

logger = structlog.get_logger(__name__)

FEEDBACK_UNAVAILABLE = "Internal server error."
FEEDBACK_SEND_FAILED = "Feedback sending failed."


class FeedbackService:
    def __init__(
        self,
        feedback: FeedbackRepositoryProtocol,
        users: UserRepositoryProtocol,
        session_manager: SessionManager,
        email: EmailService,
    ):
        self.feedback = feedback
        self.users = users
        self.session_manager = session_manager
        self.email = email

    async def give(self, token: str, text: str) -> None:
        if not self.email.is_available:
            raise ServerError(
                FEEDBACK_UNAVAILABLE,
                RuntimeError("Feedback received, but email is not configured."),
            )

        user_id = await self.session_manager.resolve(token)
        user = await self.users.get_by_id(user_id)
        document_should_exist(user, "User not found.")

        body = f"Username: {user.username}\nEmail: {user.email}\n\n{html.escape(text)}"

        sent, _ = await asyncio.gather(
            self.email.send_feedback_email(username=user.username, reply_to=user.email, body=body),
            self.feedback.create(message=body, author=user_id),
        )
        if not sent:
            raise ServerError(FEEDBACK_SEND_FAILED, RuntimeError("feedback email was not accepted"))
        logger.info("feedback_received", user_id=user_id)
