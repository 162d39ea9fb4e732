"""Document models module."""

from models.cosmos_documents import (
    ANSWER_COUNT,
    CounterDocument,
    FeedbackDocument,
    LookupDocument,
    QuestionDocument,
    SessionDocument,
    StoryDocument,
    UserDocument,
    VoteDocument,
)

__all__ = [
    "ANSWER_COUNT",
    "CounterDocument",
    "FeedbackDocument",
    "LookupDocument",
    "QuestionDocument",
    "SessionDocument",
    "StoryDocument",
    "UserDocument",
    "VoteDocument",
]
