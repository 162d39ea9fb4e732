"""
Cosmos DB document models for DynamicStory.

These Pydantic models define the document structure stored in Cosmos DB.
Documents are flat; relationships are plain id references.

Container Strategy:
- users: User accounts (partition: /id)
- username-lookup: Unique index username_lower -> user_id (partition: /id)
- email-lookup: Unique index email -> user_id (partition: /id)
- activation-lookup: Unique index activation_id -> user_id (partition: /id)
- sessions: Login sessions keyed by SHA-256 of the nonce (partition: /id)
- votes: Append-only vote records (partition: /question_id)
- questions: Questions with their five answers (partition: /id)
- stories: Stories with their pretty IDs (partition: /id)
- feedback: Feedback messages (partition: /id)
- counters: Single-document counters such as the next story pretty ID (partition: /id)
"""

import base64
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_serializer

# Every question has exactly this many answers; votes are indexes into them.
ANSWER_COUNT = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Base Document Model
# ============================================================================


class CosmosDocument(BaseModel):
    """
    Base class for Cosmos DB documents.

    All documents have:
    - id: Unique identifier (also used as partition key for most containers)
    - _ts: Timestamp (managed by Cosmos DB)
    - _etag: ETag for optimistic concurrency (managed by Cosmos DB)
    """

    id: str = Field(default_factory=lambda: str(uuid4()))

    # Allow extra fields for Cosmos DB system properties (_ts, _etag, etc.)
    model_config = {"extra": "allow"}


# ============================================================================
# User Documents
# ============================================================================


class UserDocument(CosmosDocument):
    """
    User document stored in the 'users' container.

    Users are soft-deleted only, and their username, lowercase username and
    email stay reserved forever through the lookup containers.
    """

    username: str
    username_lower: str
    email: str  # Always lowercase
    password_hash: str
    activation_id: Optional[str] = None  # Cleared once activated
    is_deleted: bool = False
    is_activated: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class LookupDocument(CosmosDocument):
    """Secondary unique index entry: id is the unique value, user_id the owner."""

    user_id: str


# ============================================================================
# Session Documents
# ============================================================================


class SessionDocument(CosmosDocument):
    """
    Session document stored in the 'sessions' container.

    id is the SHA-256 hex digest of the nonce, so the store's id uniqueness
    guarantees nonce uniqueness. ttl lets Cosmos purge the record on its own
    once expired.
    """

    owner: str
    nonce: str  # Base64 of the raw nonce bytes
    expiration_date: datetime
    ttl: int

    @property
    def nonce_bytes(self) -> bytes:
        return base64.b64decode(self.nonce)

    def is_live(self, now: Optional[datetime] = None) -> bool:
        """A session is valid iff its expiration is strictly in the future."""
        return self.expiration_date > (now or utcnow())


# ============================================================================
# Vote Documents
# ============================================================================


class VoteDocument(CosmosDocument):
    """
    Vote document stored in the 'votes' container.

    Partition key: /question_id
    Records are never edited except for the is_latest flag. Only the latest
    vote of a voter on a question counts; older ones are kept as history.
    story_pretty_id is recorded for auditing and never read back.
    """

    voter_id: str
    question_id: str
    answer: int = Field(ge=0, le=ANSWER_COUNT - 1)
    story_pretty_id: int
    timestamp: datetime = Field(default_factory=utcnow)
    is_latest: bool = True

    @field_serializer("timestamp", when_used="json")
    def serialize_timestamp(self, value: datetime) -> str:
        # Fixed width so stored timestamps sort correctly as strings
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# ============================================================================
# Content Documents
# ============================================================================


class QuestionDocument(CosmosDocument):
    """Question document stored in the 'questions' container."""

    title: str
    answers: list[str] = Field(min_length=ANSWER_COUNT, max_length=ANSWER_COUNT)
    author: str
    created_at: datetime = Field(default_factory=utcnow)


class StoryDocument(CosmosDocument):
    """
    Story document stored in the 'stories' container.

    pretty_id is handed out by the pretty ID server and never changes.
    """

    pretty_id: int
    owner: str
    title: str
    narrative: str
    question: str
    created_at: datetime = Field(default_factory=utcnow)


class FeedbackDocument(CosmosDocument):
    """Feedback document stored in the 'feedback' container."""

    message: str
    author: str
    timestamp: datetime = Field(default_factory=utcnow)


class CounterDocument(CosmosDocument):
    """Counter document stored in the 'counters' container. value is the next ID to hand out."""

    value: int
