"""
Feed endpoint: most recent stories, one page at a time.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from api.deps import get_story_service
from schemas.story import FeedItem, FeedResponse
from services.story_service import StoryService

router = APIRouter()


@router.get("/{page}", response_model=FeedResponse)
async def get_feed(
    page: Annotated[int, Path(ge=1)],
    stories: Annotated[StoryService, Depends(get_story_service)],
) -> FeedResponse:
    result = await stories.feed(page)
    return FeedResponse(
        message="Here's the feed.",
        feed=[
            FeedItem(
                story=item.story.pretty_id,
                author=item.author,
                title=item.story.title,
                narrative=item.story.narrative,
                question=item.story.question,
                creationDate=item.story.created_at,
            )
            for item in result.stories
        ],
        lastPage=result.last_page,
    )
