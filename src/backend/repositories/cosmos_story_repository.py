"""
Cosmos DB Story repository.

Stories are read by pretty ID, which is a cross-partition query; the feed
reads them newest first with OFFSET/LIMIT paging.
"""

import logging
from typing import Optional

from db.cosmos_session import (
    STORIES_CONTAINER,
    create_item,
    delete_item,
    query_count,
    query_items,
)
from models.cosmos_documents import StoryDocument

logger = logging.getLogger(__name__)


class CosmosStoryRepository:
    """Repository for story operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_pretty_id(self, pretty_id: int) -> Optional[StoryDocument]:
        """Get a story by its pretty ID."""
        query = """
            SELECT * FROM c
            WHERE c.pretty_id = @pretty_id
        """
        results = await query_items(
            STORIES_CONTAINER,
            query,
            parameters=[{"name": "@pretty_id", "value": pretty_id}],
            max_items=1,
        )
        if not results:
            return None
        return StoryDocument(**results[0])

    async def exists(self, pretty_id: int) -> bool:
        """Check if a story exists."""
        query = """
            SELECT VALUE COUNT(1) FROM c
            WHERE c.pretty_id = @pretty_id
        """
        count = await query_count(
            STORIES_CONTAINER,
            query,
            parameters=[{"name": "@pretty_id", "value": pretty_id}],
        )
        return count > 0

    async def count(self) -> int:
        """Count all stories."""
        return await query_count(STORIES_CONTAINER, "SELECT VALUE COUNT(1) FROM c")

    async def get_most_recent(self, offset: int, limit: int) -> list[StoryDocument]:
        """Get a slice of stories, newest first."""
        query = """
            SELECT * FROM c
            ORDER BY c.created_at DESC
            OFFSET @offset LIMIT @limit
        """
        results = await query_items(
            STORIES_CONTAINER,
            query,
            parameters=[
                {"name": "@offset", "value": offset},
                {"name": "@limit", "value": limit},
            ],
        )
        return [StoryDocument(**r) for r in results]

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(
        self,
        pretty_id: int,
        owner: str,
        title: str,
        narrative: str,
        question: str,
    ) -> StoryDocument:
        """Create a story under an already allocated pretty ID."""
        story = StoryDocument(
            pretty_id=pretty_id,
            owner=owner,
            title=title,
            narrative=narrative,
            question=question,
        )
        await create_item(STORIES_CONTAINER, story.model_dump(mode="json"))
        logger.info(f"Created story {pretty_id}")
        return story

    async def delete(self, story: StoryDocument) -> bool:
        """Delete a story."""
        deleted = await delete_item(STORIES_CONTAINER, story.id, partition_key=story.id)
        if deleted:
            logger.info(f"Deleted story {story.pretty_id}")
        return deleted
