"""Schemas module initialization."""

from schemas.common import MessageResponse
from schemas.feedback import FeedbackSubmit
from schemas.question import (
    AnswerTally,
    QuestionCreate,
    QuestionCreatedResponse,
    QuestionResponse,
    VoteCreate,
)
from schemas.story import FeedItem, FeedResponse, StoryCreate, StoryCreatedResponse, StoryResponse
from schemas.user import (
    ActivationRequest,
    LoginResponse,
    PasswordUpdate,
    SessionResponse,
    UserAuthenticate,
    UserCreate,
)

__all__ = [
    "MessageResponse",
    "FeedbackSubmit",
    "AnswerTally",
    "QuestionCreate",
    "QuestionCreatedResponse",
    "QuestionResponse",
    "VoteCreate",
    "FeedItem",
    "FeedResponse",
    "StoryCreate",
    "StoryCreatedResponse",
    "StoryResponse",
    "ActivationRequest",
    "LoginResponse",
    "PasswordUpdate",
    "SessionResponse",
    "UserAuthenticate",
    "UserCreate",
]
