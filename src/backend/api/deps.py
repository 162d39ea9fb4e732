"""
Shared dependencies for API endpoints.

Includes:
- Bearer token extraction (required and optional)
- Service construction on top of the repository providers

Tests swap repositories or whole services with app.dependency_overrides.
"""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.errors import SessionNotFoundError
from repositories.provider import (
    FeedbackRepositoryProtocol,
    QuestionRepositoryProtocol,
    SessionRepositoryProtocol,
    StoryRepositoryProtocol,
    UserRepositoryProtocol,
    VoteRepositoryProtocol,
    get_feedback_repository,
    get_question_repository,
    get_session_repository,
    get_story_repository,
    get_user_repository,
    get_vote_repository,
)
from services.account_service import AccountManager
from services.email_service import EmailService, get_email_service
from services.feedback_service import FeedbackService
from services.pretty_id_client import PrettyIdClient
from services.question_service import QuestionService
from services.session_service import SessionManager
from services.story_service import StoryService
from services.vote_service import VoteLedger

# auto_error is off so a missing header goes through our own error envelope
security = HTTPBearer(auto_error=False)


# =============================================================================
# Tokens
# =============================================================================


async def get_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> str:
    """The caller's bearer token. Its session is resolved by the service."""
    if credentials is None or not credentials.credentials:
        raise SessionNotFoundError("You are not currently logged in.")
    return credentials.credentials


async def get_optional_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[str]:
    """The caller's bearer token, or None for anonymous requests."""
    if credentials is None:
        return None
    return credentials.credentials or None


# =============================================================================
# Services
# =============================================================================


def get_session_manager(
    sessions: Annotated[SessionRepositoryProtocol, Depends(get_session_repository)],
) -> SessionManager:
    return SessionManager(sessions)


def get_vote_ledger(
    votes: Annotated[VoteRepositoryProtocol, Depends(get_vote_repository)],
) -> VoteLedger:
    return VoteLedger(votes)


def get_account_manager(
    users: Annotated[UserRepositoryProtocol, Depends(get_user_repository)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> AccountManager:
    return AccountManager(users, session_manager)


def get_pretty_id_client() -> PrettyIdClient:
    return PrettyIdClient()


def get_story_service(
    stories: Annotated[StoryRepositoryProtocol, Depends(get_story_repository)],
    users: Annotated[UserRepositoryProtocol, Depends(get_user_repository)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    pretty_ids: Annotated[PrettyIdClient, Depends(get_pretty_id_client)],
) -> StoryService:
    return StoryService(stories, users, session_manager, pretty_ids)


def get_question_service(
    questions: Annotated[QuestionRepositoryProtocol, Depends(get_question_repository)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    vote_ledger: Annotated[VoteLedger, Depends(get_vote_ledger)],
    story_service: Annotated[StoryService, Depends(get_story_service)],
) -> QuestionService:
    return QuestionService(questions, session_manager, vote_ledger, story_service)


def get_feedback_service(
    feedback: Annotated[FeedbackRepositoryProtocol, Depends(get_feedback_repository)],
    users: Annotated[UserRepositoryProtocol, Depends(get_user_repository)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    email: Annotated[EmailService, Depends(get_email_service)],
) -> FeedbackService:
    return FeedbackService(feedback, users, session_manager, email)
