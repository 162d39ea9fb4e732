"""
Tests for Cosmos DB counter and story repositories.
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest


@pytest.mark.unit
class TestCosmosCounterRepository:
    """Test CosmosCounterRepository operations."""

    async def test_increment_returns_previous_value(self) -> None:
        from repositories.cosmos_counter_repository import CosmosCounterRepository

        with patch("repositories.cosmos_counter_repository.patch_item") as mock_patch:
            mock_patch.return_value = {"id": "story-pretty-id", "value": 8}

            assert await CosmosCounterRepository().increment() == 7

        kwargs = mock_patch.await_args.kwargs
        assert kwargs["operations"] == [{"op": "incr", "path": "/value", "value": 1}]
        assert kwargs["partition_key"] == "story-pretty-id"

    async def test_increment_missing_counter(self) -> None:
        from repositories.cosmos_counter_repository import CosmosCounterRepository

        with patch("repositories.cosmos_counter_repository.patch_item", return_value=None):
            assert await CosmosCounterRepository().increment() is None

    async def test_create(self) -> None:
        from repositories.cosmos_counter_repository import CosmosCounterRepository

        with patch("repositories.cosmos_counter_repository.create_item") as mock_create:
            counter = await CosmosCounterRepository().create(2)

        assert counter.value == 2
        assert mock_create.await_args.args == ("counters", {"id": "story-pretty-id", "value": 2})


@pytest.mark.unit
class TestCosmosStoryRepository:
    """Test CosmosStoryRepository operations."""

    async def test_get_by_pretty_id(self) -> None:
        from repositories.cosmos_story_repository import CosmosStoryRepository

        stored = {
            "id": "story-1",
            "pretty_id": 3,
            "owner": "user-1",
            "title": "A story about things",
            "narrative": "Once upon a time there was a test.",
            "question": "question-1",
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        with patch("repositories.cosmos_story_repository.query_items", return_value=[stored]) as mock_query:
            story = await CosmosStoryRepository().get_by_pretty_id(3)

        assert story.id == "story-1"
        assert mock_query.await_args.kwargs["max_items"] == 1

    async def test_get_by_pretty_id_missing(self) -> None:
        from repositories.cosmos_story_repository import CosmosStoryRepository

        with patch("repositories.cosmos_story_repository.query_items", return_value=[]):
            assert await CosmosStoryRepository().get_by_pretty_id(3) is None

    async def test_exists(self) -> None:
        from repositories.cosmos_story_repository import CosmosStoryRepository

        with patch("repositories.cosmos_story_repository.query_count", return_value=1):
            assert await CosmosStoryRepository().exists(3) is True

    async def test_get_most_recent_paging(self) -> None:
        from repositories.cosmos_story_repository import CosmosStoryRepository

        with patch("repositories.cosmos_story_repository.query_items", return_value=[]) as mock_query:
            await CosmosStoryRepository().get_most_recent(offset=80, limit=40)

        query = mock_query.await_args.args[1]
        assert "ORDER BY c.created_at DESC" in query
        assert mock_query.await_args.kwargs["parameters"] == [
            {"name": "@offset", "value": 80},
            {"name": "@limit", "value": 40},
        ]
