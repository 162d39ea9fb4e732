"""
Cosmos DB Vote repository.

Votes are append-only: a re-vote inserts a new record and clears the
is_latest flag on the previous one instead of editing its answer.
Partition key is question_id for efficient per-question queries.
"""

import logging
from typing import Optional

from db.cosmos_session import (
    VOTES_CONTAINER,
    create_item,
    patch_item,
    query_items,
)
from models.cosmos_documents import VoteDocument

logger = logging.getLogger(__name__)


class CosmosVoteRepository:
    """Repository for vote operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def find_active(self, voter_id: str, question_id: str) -> list[VoteDocument]:
        """
        Find a voter's active votes on a question, newest first.

        Normally there is at most one; two can exist briefly if concurrent
        re-votes interleave.
        """
        query = """
            SELECT * FROM c
            WHERE c.voter_id = @voter_id
              AND c.question_id = @question_id
              AND c.is_latest = true
            ORDER BY c.timestamp DESC
        """
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[
                {"name": "@voter_id", "value": voter_id},
                {"name": "@question_id", "value": question_id},
            ],
            partition_key=question_id,
        )
        return [VoteDocument(**r) for r in results]

    async def get_latest(self, voter_id: str, question_id: str) -> Optional[VoteDocument]:
        """Get a voter's current vote on a question."""
        active = await self.find_active(voter_id, question_id)
        return active[0] if active else None

    async def get_active_answers(self, question_id: str) -> list[dict]:
        """Get voter, answer and timestamp of every active vote on a question."""
        query = """
            SELECT c.voter_id, c.answer, c.timestamp FROM c
            WHERE c.question_id = @question_id
              AND c.is_latest = true
        """
        return await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@question_id", "value": question_id}],
            partition_key=question_id,
        )

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(
        self,
        voter_id: str,
        question_id: str,
        answer: int,
        story_pretty_id: int,
    ) -> VoteDocument:
        """Insert a new active vote. Does not check for an existing one."""
        vote = VoteDocument(
            voter_id=voter_id,
            question_id=question_id,
            answer=answer,
            story_pretty_id=story_pretty_id,
        )
        await create_item(VOTES_CONTAINER, vote.model_dump(mode="json"))
        logger.debug(f"Created vote on question {question_id}")
        return vote

    async def deactivate(self, vote: VoteDocument) -> bool:
        """Clear the is_latest flag on one vote. Returns False if it was already inactive."""
        updated = await patch_item(
            VOTES_CONTAINER,
            vote.id,
            partition_key=vote.question_id,
            operations=[{"op": "set", "path": "/is_latest", "value": False}],
            filter_predicate="FROM c WHERE c.is_latest = true",
        )
        return updated is not None
