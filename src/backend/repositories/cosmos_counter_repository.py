"""
Cosmos DB Counter repository.

A counter is a single document holding the next value to hand out.
"""

import logging
from typing import Optional

from db.cosmos_session import COUNTERS_CONTAINER, create_item, patch_item
from models.cosmos_documents import CounterDocument

logger = logging.getLogger(__name__)

STORY_PRETTY_ID_COUNTER = "story-pretty-id"


class CosmosCounterRepository:
    """Repository for counters using Cosmos DB."""

    def __init__(self, counter_id: str = STORY_PRETTY_ID_COUNTER):
        self.counter_id = counter_id

    async def increment(self) -> Optional[int]:
        """
        Atomically increment the counter and return its value before the increment.

        Returns None if the counter document doesn't exist yet.
        """
        data = await patch_item(
            COUNTERS_CONTAINER,
            self.counter_id,
            partition_key=self.counter_id,
            operations=[{"op": "incr", "path": "/value", "value": 1}],
        )
        if data is None:
            return None
        return CounterDocument(**data).value - 1

    async def create(self, value: int) -> CounterDocument:
        """Create the counter document holding the next value to hand out."""
        counter = CounterDocument(id=self.counter_id, value=value)
        await create_item(COUNTERS_CONTAINER, counter.model_dump(mode="json"))
        logger.info(f"Created counter {self.counter_id} at {value}")
        return counter
