"""Repository modules for database access."""

from repositories.cosmos_counter_repository import CosmosCounterRepository
from repositories.cosmos_feedback_repository import CosmosFeedbackRepository
from repositories.cosmos_question_repository import CosmosQuestionRepository
from repositories.cosmos_session_repository import CosmosSessionRepository
from repositories.cosmos_story_repository import CosmosStoryRepository
from repositories.cosmos_user_repository import CosmosUserRepository
from repositories.cosmos_vote_repository import CosmosVoteRepository

__all__ = [
    "CosmosCounterRepository",
    "CosmosFeedbackRepository",
    "CosmosQuestionRepository",
    "CosmosSessionRepository",
    "CosmosStoryRepository",
    "CosmosUserRepository",
    "CosmosVoteRepository",
]
