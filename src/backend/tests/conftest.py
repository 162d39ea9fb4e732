"""
Pytest fixtures for DynamicStory backend tests.

Services run against the in-memory repositories below; API tests plug the
same fakes in through FastAPI dependency overrides.
"""

import base64
import os
from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SESSION_REAPER_ENABLED", "false")

from core.errors import StorageError  # noqa: E402
from core.security import nonce_key  # noqa: E402
from models.cosmos_documents import (  # noqa: E402
    CounterDocument,
    FeedbackDocument,
    QuestionDocument,
    SessionDocument,
    StoryDocument,
    UserDocument,
    VoteDocument,
)


def conflict() -> StorageError:
    return StorageError(RuntimeError("Conflict (409): entity with the specified id already exists"))


# =============================================================================
# In-memory repositories
# =============================================================================


class FakeSessionRepository:
    def __init__(self) -> None:
        self.sessions: dict[str, SessionDocument] = {}

    async def get_by_nonce(self, nonce: bytes) -> Optional[SessionDocument]:
        return self.sessions.get(nonce_key(nonce))

    async def nonce_exists(self, nonce: bytes) -> bool:
        return nonce_key(nonce) in self.sessions

    async def get_expired_ids(self, now_epoch: int) -> list[str]:
        return [s.id for s in self.sessions.values() if s.expiration_date.timestamp() <= now_epoch]

    async def create(self, owner: str, nonce: bytes, expiration_date: datetime, ttl: int) -> SessionDocument:
        key = nonce_key(nonce)
        if key in self.sessions:
            raise conflict()
        session = SessionDocument(
            id=key,
            owner=owner,
            nonce=base64.b64encode(nonce).decode("ascii"),
            expiration_date=expiration_date,
            ttl=ttl,
        )
        self.sessions[key] = session
        return session

    async def delete_by_nonce(self, nonce: bytes) -> Optional[SessionDocument]:
        return self.sessions.pop(nonce_key(nonce), None)

    async def delete_by_id(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    async def delete_by_owner(self, owner: str) -> int:
        owned = [key for key, s in self.sessions.items() if s.owner == owner]
        for key in owned:
            del self.sessions[key]
        return len(owned)


class FakeVoteRepository:
    def __init__(self) -> None:
        self.votes: list[VoteDocument] = []

    async def find_active(self, voter_id: str, question_id: str) -> list[VoteDocument]:
        active = [
            (i, v)
            for i, v in enumerate(self.votes)
            if v.voter_id == voter_id and v.question_id == question_id and v.is_latest
        ]
        active.sort(key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
        return [v for _, v in active]

    async def get_latest(self, voter_id: str, question_id: str) -> Optional[VoteDocument]:
        active = await self.find_active(voter_id, question_id)
        return active[0] if active else None

    async def get_active_answers(self, question_id: str) -> list[dict]:
        return [
            {"voter_id": v.voter_id, "answer": v.answer, "timestamp": v.timestamp.isoformat()}
            for v in self.votes
            if v.question_id == question_id and v.is_latest
        ]

    async def create(self, voter_id: str, question_id: str, answer: int, story_pretty_id: int) -> VoteDocument:
        vote = VoteDocument(
            voter_id=voter_id,
            question_id=question_id,
            answer=answer,
            story_pretty_id=story_pretty_id,
        )
        self.votes.append(vote)
        return vote

    async def deactivate(self, vote: VoteDocument) -> bool:
        for stored in self.votes:
            if stored.id == vote.id and stored.is_latest:
                stored.is_latest = False
                return True
        return False


class FakeUserRepository:
    def __init__(self) -> None:
        self.users: dict[str, UserDocument] = {}
        self.usernames: dict[str, str] = {}
        self.emails: dict[str, str] = {}
        self.activation_ids: dict[str, str] = {}

    async def get_by_id(self, user_id: str) -> Optional[UserDocument]:
        return self.users.get(user_id)

    async def get_by_ids(self, user_ids: list[str]) -> list[UserDocument]:
        return [self.users[i] for i in dict.fromkeys(user_ids) if i in self.users]

    async def get_by_email(self, email: str) -> Optional[UserDocument]:
        user_id = self.emails.get(email.lower())
        return self.users.get(user_id) if user_id else None

    async def get_by_username(self, username: str) -> Optional[UserDocument]:
        user_id = self.usernames.get(username.lower())
        return self.users.get(user_id) if user_id else None

    async def username_exists(self, username: str) -> bool:
        return username.lower() in self.usernames

    async def email_exists(self, email: str) -> bool:
        return email.lower() in self.emails

    async def activation_id_exists(self, activation_id: str) -> bool:
        return activation_id in self.activation_ids

    async def create(self, username: str, email: str, password_hash: str, activation_id: str) -> UserDocument:
        if username.lower() in self.usernames or email.lower() in self.emails:
            raise conflict()
        user = UserDocument(
            username=username,
            username_lower=username.lower(),
            email=email.lower(),
            password_hash=password_hash,
            activation_id=activation_id,
        )
        self.users[user.id] = user
        self.usernames[user.username_lower] = user.id
        self.emails[user.email] = user.id
        self.activation_ids[activation_id] = user.id
        return user

    async def update_password(self, user_id: str, password_hash: str) -> Optional[UserDocument]:
        user = self.users.get(user_id)
        if user is None:
            return None
        user.password_hash = password_hash
        return user

    async def mark_deleted(self, user_id: str) -> Optional[UserDocument]:
        user = self.users.get(user_id)
        if user is None:
            return None
        user.is_deleted = True
        return user

    async def activate(self, activation_id: str) -> Optional[UserDocument]:
        user_id = self.activation_ids.pop(activation_id, None)
        if user_id is None:
            return None
        user = self.users[user_id]
        user.is_activated = True
        user.activation_id = None
        return user


class FakeQuestionRepository:
    def __init__(self) -> None:
        self.questions: dict[str, QuestionDocument] = {}

    async def get_by_id(self, question_id: str) -> Optional[QuestionDocument]:
        return self.questions.get(question_id)

    async def create(self, title: str, answers: list[str], author: str) -> QuestionDocument:
        question = QuestionDocument(title=title, answers=answers, author=author)
        self.questions[question.id] = question
        return question


class FakeStoryRepository:
    def __init__(self) -> None:
        self.stories: list[StoryDocument] = []

    async def get_by_pretty_id(self, pretty_id: int) -> Optional[StoryDocument]:
        return next((s for s in self.stories if s.pretty_id == pretty_id), None)

    async def exists(self, pretty_id: int) -> bool:
        return await self.get_by_pretty_id(pretty_id) is not None

    async def count(self) -> int:
        return len(self.stories)

    async def get_most_recent(self, offset: int, limit: int) -> list[StoryDocument]:
        ordered = sorted(self.stories, key=lambda s: s.created_at, reverse=True)
        return ordered[offset : offset + limit]

    async def create(self, pretty_id: int, owner: str, title: str, narrative: str, question: str) -> StoryDocument:
        story = StoryDocument(pretty_id=pretty_id, owner=owner, title=title, narrative=narrative, question=question)
        self.stories.append(story)
        return story

    async def delete(self, story: StoryDocument) -> bool:
        before = len(self.stories)
        self.stories = [s for s in self.stories if s.id != story.id]
        return len(self.stories) < before


class FakeFeedbackRepository:
    def __init__(self) -> None:
        self.feedback: list[FeedbackDocument] = []

    async def create(self, message: str, author: str) -> FeedbackDocument:
        feedback = FeedbackDocument(message=message, author=author)
        self.feedback.append(feedback)
        return feedback


class FakeCounterRepository:
    def __init__(self, value: Optional[int] = None) -> None:
        self.value = value

    async def increment(self) -> Optional[int]:
        if self.value is None:
            return None
        self.value += 1
        return self.value - 1

    async def create(self, value: int) -> CounterDocument:
        if self.value is not None:
            raise conflict()
        self.value = value
        return CounterDocument(id="story-pretty-id", value=value)


# =============================================================================
# Repository and service fixtures
# =============================================================================


@pytest.fixture
def session_repo() -> FakeSessionRepository:
    return FakeSessionRepository()


@pytest.fixture
def vote_repo() -> FakeVoteRepository:
    return FakeVoteRepository()


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def question_repo() -> FakeQuestionRepository:
    return FakeQuestionRepository()


@pytest.fixture
def story_repo() -> FakeStoryRepository:
    return FakeStoryRepository()


@pytest.fixture
def feedback_repo() -> FakeFeedbackRepository:
    return FakeFeedbackRepository()


@pytest.fixture
def counter_repo() -> FakeCounterRepository:
    return FakeCounterRepository()


@pytest.fixture
def session_manager(session_repo: FakeSessionRepository) -> Any:
    from services.session_service import SessionManager

    return SessionManager(session_repo)


@pytest.fixture
def vote_ledger(vote_repo: FakeVoteRepository) -> Any:
    from services.vote_service import VoteLedger

    return VoteLedger(vote_repo)


@pytest.fixture
def account_manager(user_repo: FakeUserRepository, session_manager: Any) -> Any:
    from services.account_service import AccountManager

    return AccountManager(user_repo, session_manager)


@pytest.fixture
def pretty_id_client() -> MagicMock:
    """Pretty ID client handing out 1, 2, 3, ..."""
    client = MagicMock()
    counter = iter(range(1, 10_000))
    client.next_id = AsyncMock(side_effect=lambda: next(counter))
    return client


@pytest.fixture
def story_service(
    story_repo: FakeStoryRepository,
    user_repo: FakeUserRepository,
    session_manager: Any,
    pretty_id_client: MagicMock,
) -> Any:
    from services.story_service import StoryService

    return StoryService(story_repo, user_repo, session_manager, pretty_id_client)


@pytest.fixture
def question_service(
    question_repo: FakeQuestionRepository,
    session_manager: Any,
    vote_ledger: Any,
    story_service: Any,
) -> Any:
    from services.question_service import QuestionService

    return QuestionService(question_repo, session_manager, vote_ledger, story_service)


@pytest.fixture
def mock_email_service() -> MagicMock:
    """Email service that is configured and accepts every message."""
    email = MagicMock()
    email.is_available = True
    email.send_activation_email = AsyncMock(return_value=True)
    email.send_feedback_email = AsyncMock(return_value=True)
    return email


@pytest.fixture
def feedback_service(
    feedback_repo: FakeFeedbackRepository,
    user_repo: FakeUserRepository,
    session_manager: Any,
    mock_email_service: MagicMock,
) -> Any:
    from services.feedback_service import FeedbackService

    return FeedbackService(feedback_repo, user_repo, session_manager, mock_email_service)


# =============================================================================
# API fixtures
# =============================================================================


@pytest.fixture
async def app(
    session_repo: FakeSessionRepository,
    vote_repo: FakeVoteRepository,
    user_repo: FakeUserRepository,
    question_repo: FakeQuestionRepository,
    story_repo: FakeStoryRepository,
    feedback_repo: FakeFeedbackRepository,
    pretty_id_client: MagicMock,
    mock_email_service: MagicMock,
) -> AsyncGenerator[Any, None]:
    """FastAPI application wired to the in-memory repositories."""
    from api import deps
    from main import app as fastapi_app
    from repositories import provider

    fastapi_app.dependency_overrides.update(
        {
            provider.get_session_repository: lambda: session_repo,
            provider.get_vote_repository: lambda: vote_repo,
            provider.get_user_repository: lambda: user_repo,
            provider.get_question_repository: lambda: question_repo,
            provider.get_story_repository: lambda: story_repo,
            provider.get_feedback_repository: lambda: feedback_repo,
            deps.get_pretty_id_client: lambda: pretty_id_client,
            deps.get_email_service: lambda: mock_email_service,
        }
    )
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def sample_user_data() -> dict[str, Any]:
    """Sample registration data for testing."""
    return {
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret1",
    }
