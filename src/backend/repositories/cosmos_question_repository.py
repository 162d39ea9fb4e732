"""
Cosmos DB Question repository.
"""

import logging
from typing import Optional

from db.cosmos_session import QUESTIONS_CONTAINER, create_item, read_item
from models.cosmos_documents import QuestionDocument

logger = logging.getLogger(__name__)


class CosmosQuestionRepository:
    """Repository for question operations using Cosmos DB."""

    async def get_by_id(self, question_id: str) -> Optional[QuestionDocument]:
        """Get a question by ID (point read)."""
        data = await read_item(QUESTIONS_CONTAINER, question_id, partition_key=question_id)
        if data is None:
            return None
        return QuestionDocument(**data)

    async def create(self, title: str, answers: list[str], author: str) -> QuestionDocument:
        """Create a question with its five answers."""
        question = QuestionDocument(title=title, answers=answers, author=author)
        await create_item(QUESTIONS_CONTAINER, question.model_dump(mode="json"))
        logger.debug(f"Created question {question.id}")
        return question
