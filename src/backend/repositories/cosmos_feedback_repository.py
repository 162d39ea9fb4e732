"""
Cosmos DB Feedback repository.
"""

import logging

from db.cosmos_session import FEEDBACK_CONTAINER, create_item
from models.cosmos_documents import FeedbackDocument

logger = logging.getLogger(__name__)


class CosmosFeedbackRepository:
    """Repository for feedback storage using Cosmos DB."""

    async def create(self, message: str, author: str) -> FeedbackDocument:
        """Store a feedback message."""
        feedback = FeedbackDocument(message=message, author=author)
        await create_item(FEEDBACK_CONTAINER, feedback.model_dump(mode="json"))
        logger.debug(f"Stored feedback {feedback.id} from user {author}")
        return feedback
