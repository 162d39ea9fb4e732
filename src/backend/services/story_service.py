"""
Story service: creating, reading and deleting stories, and the feed.
"""

import asyncio
import math
from dataclasses import dataclass
from typing import Optional

import structlog

from core.config import settings
from core.errors import ClientError, document_should_exist
from models.cosmos_documents import StoryDocument
from repositories.provider import StoryRepositoryProtocol, UserRepositoryProtocol
from services.pretty_id_client import PrettyIdClient
from services.session_service import SessionManager

logger = structlog.get_logger(__name__)

STORY_NOT_FOUND = "Story doesn't exist."
NOT_STORY_OWNER = "You are not the story owner."


@dataclass
class AuthoredStory:
    """A story together with its owner's username."""

    story: StoryDocument
    author: Optional[str]


@dataclass
class FeedPage:
    stories: list[AuthoredStory]
    last_page: int


class StoryService:
    """Stories and the feed of most recent stories."""

    def __init__(
        self,
        stories: StoryRepositoryProtocol,
        users: UserRepositoryProtocol,
        session_manager: SessionManager,
        pretty_ids: PrettyIdClient,
    ):
        self.stories = stories
        self.users = users
        self.session_manager = session_manager
        self.pretty_ids = pretty_ids

    async def create(self, token: str, title: str, narrative: str, question_id: str) -> int:
        """Create a story for the caller and return its pretty ID."""
        owner = await self.session_manager.resolve(token)
        pretty_id = await self.pretty_ids.next_id()
        await self.stories.create(
            pretty_id=pretty_id,
            owner=owner,
            title=title,
            narrative=narrative,
            question=question_id,
        )
        logger.info("story_created", pretty_id=pretty_id, user_id=owner)
        return pretty_id

    async def get(self, pretty_id: int) -> AuthoredStory:
        story = await self.stories.get_by_pretty_id(pretty_id)
        document_should_exist(story, STORY_NOT_FOUND)
        owner = await self.users.get_by_id(story.owner)
        return AuthoredStory(story=story, author=owner.username if owner else None)

    async def ensure_exists(self, pretty_id: int) -> None:
        """Raise a ClientError unless the story exists."""
        document_should_exist(await self.stories.exists(pretty_id), STORY_NOT_FOUND)

    async def delete(self, token: str, pretty_id: int) -> None:
        """Delete a story. Only its owner may do so."""
        user_id = await self.session_manager.resolve(token)
        story = await self.stories.get_by_pretty_id(pretty_id)
        document_should_exist(story, STORY_NOT_FOUND)

        if story.owner != user_id:
            raise ClientError(NOT_STORY_OWNER)

        await self.stories.delete(story)
        logger.info("story_deleted", pretty_id=pretty_id, user_id=user_id)

    async def feed(self, page: int, page_size: Optional[int] = None) -> FeedPage:
        """
        One page of stories, newest first.

        Pages start at 1. Each story carries its author's username, in story
        order and repeated for authors with several stories on the page.
        """
        size = page_size or settings.FEED_PAGE_SIZE
        total, stories = await asyncio.gather(
            self.stories.count(),
            self.stories.get_most_recent(offset=size * (page - 1), limit=size),
        )

        owners = await self.users.get_by_ids([story.owner for story in stories])
        usernames = {owner.id: owner.username for owner in owners}

        return FeedPage(
            stories=[AuthoredStory(story=story, author=usernames.get(story.owner)) for story in stories],
            last_page=math.ceil(total / size),
        )
