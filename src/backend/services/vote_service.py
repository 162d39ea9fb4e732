"""
Vote Ledger.

Votes are append-only. Each (voter, question) pair has at most one active
record; re-voting deactivates the old record and inserts a new one instead
of rewriting its answer, so the full history stays in the store.

The deactivation and the insert are issued concurrently and are not atomic
together. If one of them fails, a pair can be left with zero or two active
records until the voter casts again; the next cast deactivates every active
record it finds and count() only credits each voter's newest active record.
"""

import asyncio
from datetime import datetime
from typing import Optional

import structlog

from models.cosmos_documents import ANSWER_COUNT, VoteDocument
from repositories.provider import VoteRepositoryProtocol

logger = structlog.get_logger(__name__)


def _as_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


class VoteLedger:
    """Records votes and tallies the active ones."""

    def __init__(self, votes: VoteRepositoryProtocol):
        self.votes = votes

    async def cast(self, voter_id: str, question_id: str, answer: int, story_id: int) -> VoteDocument:
        """
        Record a voter's answer on a question.

        The caller is responsible for checking that the voter, question and
        story exist.
        """
        active = await self.votes.find_active(voter_id, question_id)

        insert = self.votes.create(
            voter_id=voter_id,
            question_id=question_id,
            answer=answer,
            story_pretty_id=story_id,
        )
        if not active:
            vote = await insert
            logger.info("vote_cast", question_id=question_id, answer=answer)
            return vote

        results = await asyncio.gather(
            *(self.votes.deactivate(previous) for previous in active),
            insert,
        )
        vote = results[-1]
        logger.info(
            "vote_changed",
            question_id=question_id,
            answer=answer,
            previous_answer=active[0].answer,
            deactivated=sum(1 for r in results[:-1] if r),
        )
        return vote

    async def get(self, voter_id: str, question_id: str) -> Optional[VoteDocument]:
        """The voter's current vote on a question, or None if they haven't voted."""
        return await self.votes.get_latest(voter_id, question_id)

    async def count(self, question_id: str) -> list[int]:
        """
        Tally active votes per answer index.

        A question without votes, or one that doesn't exist, yields all zeros.
        """
        newest: dict[str, dict] = {}
        for record in await self.votes.get_active_answers(question_id):
            voter_id = record["voter_id"]
            current = newest.get(voter_id)
            if current is None or _as_datetime(record["timestamp"]) > _as_datetime(current["timestamp"]):
                newest[voter_id] = record

        counts = [0] * ANSWER_COUNT
        for record in newest.values():
            answer = record["answer"]
            if 0 <= answer < ANSWER_COUNT:
                counts[answer] += 1
        return counts
