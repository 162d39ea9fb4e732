"""
Repository provider for dependency injection.

This module provides a unified interface for accessing repositories
using Cosmos DB as the data store. Services depend on the protocols
below, not on the Cosmos classes, so tests can hand them in-memory fakes.

Usage:
    from repositories.provider import get_session_repository, ...

    # In FastAPI dependencies:
    def get_session_manager(
        sessions: SessionRepositoryProtocol = Depends(get_session_repository),
    ) -> SessionManager:
        return SessionManager(sessions)
"""

import logging
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from models.cosmos_documents import (
    CounterDocument,
    FeedbackDocument,
    QuestionDocument,
    SessionDocument,
    StoryDocument,
    UserDocument,
    VoteDocument,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Repository Protocols (Interfaces)
# =============================================================================


@runtime_checkable
class SessionRepositoryProtocol(Protocol):
    """Protocol defining session repository operations."""

    async def get_by_nonce(self, nonce: bytes) -> Optional[SessionDocument]: ...
    async def nonce_exists(self, nonce: bytes) -> bool: ...
    async def get_expired_ids(self, now_epoch: int) -> list[str]: ...
    async def create(self, owner: str, nonce: bytes, expiration_date: datetime, ttl: int) -> SessionDocument: ...
    async def delete_by_nonce(self, nonce: bytes) -> Optional[SessionDocument]: ...
    async def delete_by_id(self, session_id: str) -> bool: ...
    async def delete_by_owner(self, owner: str) -> int: ...


@runtime_checkable
class VoteRepositoryProtocol(Protocol):
    """Protocol defining vote repository operations."""

    async def find_active(self, voter_id: str, question_id: str) -> list[VoteDocument]: ...
    async def get_latest(self, voter_id: str, question_id: str) -> Optional[VoteDocument]: ...
    async def get_active_answers(self, question_id: str) -> list[dict]: ...
    async def create(self, voter_id: str, question_id: str, answer: int, story_pretty_id: int) -> VoteDocument: ...
    async def deactivate(self, vote: VoteDocument) -> bool: ...


@runtime_checkable
class UserRepositoryProtocol(Protocol):
    """Protocol defining user repository operations."""

    async def get_by_id(self, user_id: str) -> Optional[UserDocument]: ...
    async def get_by_ids(self, user_ids: list[str]) -> list[UserDocument]: ...
    async def get_by_email(self, email: str) -> Optional[UserDocument]: ...
    async def get_by_username(self, username: str) -> Optional[UserDocument]: ...
    async def username_exists(self, username: str) -> bool: ...
    async def email_exists(self, email: str) -> bool: ...
    async def activation_id_exists(self, activation_id: str) -> bool: ...
    async def create(self, username: str, email: str, password_hash: str, activation_id: str) -> UserDocument: ...
    async def update_password(self, user_id: str, password_hash: str) -> Optional[UserDocument]: ...
    async def mark_deleted(self, user_id: str) -> Optional[UserDocument]: ...
    async def activate(self, activation_id: str) -> Optional[UserDocument]: ...


@runtime_checkable
class QuestionRepositoryProtocol(Protocol):
    """Protocol defining question repository operations."""

    async def get_by_id(self, question_id: str) -> Optional[QuestionDocument]: ...
    async def create(self, title: str, answers: list[str], author: str) -> QuestionDocument: ...


@runtime_checkable
class StoryRepositoryProtocol(Protocol):
    """Protocol defining story repository operations."""

    async def get_by_pretty_id(self, pretty_id: int) -> Optional[StoryDocument]: ...
    async def exists(self, pretty_id: int) -> bool: ...
    async def count(self) -> int: ...
    async def get_most_recent(self, offset: int, limit: int) -> list[StoryDocument]: ...
    async def create(self, pretty_id: int, owner: str, title: str, narrative: str, question: str) -> StoryDocument: ...
    async def delete(self, story: StoryDocument) -> bool: ...


@runtime_checkable
class FeedbackRepositoryProtocol(Protocol):
    """Protocol defining feedback repository operations."""

    async def create(self, message: str, author: str) -> FeedbackDocument: ...


@runtime_checkable
class CounterRepositoryProtocol(Protocol):
    """Protocol defining counter repository operations."""

    async def increment(self) -> Optional[int]: ...
    async def create(self, value: int) -> CounterDocument: ...


# =============================================================================
# Repository Factory Functions
# =============================================================================


def get_session_repository() -> SessionRepositoryProtocol:
    from repositories.cosmos_session_repository import CosmosSessionRepository

    return CosmosSessionRepository()


def get_vote_repository() -> VoteRepositoryProtocol:
    from repositories.cosmos_vote_repository import CosmosVoteRepository

    return CosmosVoteRepository()


def get_user_repository() -> UserRepositoryProtocol:
    from repositories.cosmos_user_repository import CosmosUserRepository

    return CosmosUserRepository()


def get_question_repository() -> QuestionRepositoryProtocol:
    from repositories.cosmos_question_repository import CosmosQuestionRepository

    return CosmosQuestionRepository()


def get_story_repository() -> StoryRepositoryProtocol:
    from repositories.cosmos_story_repository import CosmosStoryRepository

    return CosmosStoryRepository()


def get_feedback_repository() -> FeedbackRepositoryProtocol:
    from repositories.cosmos_feedback_repository import CosmosFeedbackRepository

    return CosmosFeedbackRepository()


def get_counter_repository() -> CounterRepositoryProtocol:
    from repositories.cosmos_counter_repository import CosmosCounterRepository

    return CosmosCounterRepository()
