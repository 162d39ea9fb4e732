"""
Story endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from api.deps import get_story_service, get_token
from schemas.common import MessageResponse
from schemas.story import StoryCreate, StoryCreatedResponse, StoryResponse
from services.story_service import StoryService

router = APIRouter()


@router.post("", response_model=StoryCreatedResponse)
async def create_story(
    body: StoryCreate,
    token: Annotated[str, Depends(get_token)],
    stories: Annotated[StoryService, Depends(get_story_service)],
) -> StoryCreatedResponse:
    pretty_id = await stories.create(token, body.title, body.narrative, body.question)
    return StoryCreatedResponse(message="Story created.", story=pretty_id)


@router.get("/{pretty_id}", response_model=StoryResponse)
async def get_story(
    pretty_id: Annotated[int, Path(ge=1)],
    stories: Annotated[StoryService, Depends(get_story_service)],
) -> StoryResponse:
    result = await stories.get(pretty_id)
    return StoryResponse(
        message="Here's the story.",
        title=result.story.title,
        narrative=result.story.narrative,
        author=result.author,
        creationDate=result.story.created_at,
        question=result.story.question,
    )


@router.delete("/{pretty_id}", response_model=MessageResponse)
async def delete_story(
    pretty_id: Annotated[int, Path(ge=1)],
    token: Annotated[str, Depends(get_token)],
    stories: Annotated[StoryService, Depends(get_story_service)],
) -> MessageResponse:
    await stories.delete(token, pretty_id)
    return MessageResponse(message="Story deleted.")
