"""
Story and feed Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from core.config import settings
from schemas.common import MessageResponse


class StoryCreate(BaseModel):
    title: str = Field(
        ...,
        min_length=settings.STORY_TITLE_MIN_LENGTH,
        max_length=settings.STORY_TITLE_MAX_LENGTH,
    )
    narrative: str = Field(
        ...,
        min_length=settings.STORY_NARRATIVE_MIN_LENGTH,
        max_length=settings.STORY_NARRATIVE_MAX_LENGTH,
    )
    question: str = Field(..., min_length=1)


class StoryCreatedResponse(MessageResponse):
    story: int


class StoryResponse(MessageResponse):
    title: str
    narrative: str
    author: Optional[str] = None
    creationDate: datetime
    question: str


class FeedItem(BaseModel):
    story: int
    author: Optional[str] = None
    title: str
    narrative: str
    question: str
    creationDate: datetime


class FeedResponse(MessageResponse):
    feed: list[FeedItem]
    lastPage: int
