"""
Question service: creating questions, showing them with their tallies and
voting on them through the Vote Ledger.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from core.errors import SessionNotFoundError, document_should_exist
from models.cosmos_documents import QuestionDocument, VoteDocument
from repositories.provider import QuestionRepositoryProtocol
from services.session_service import SessionManager
from services.story_service import StoryService
from services.vote_service import VoteLedger

logger = structlog.get_logger(__name__)

QUESTION_NOT_FOUND = "Couldn't find that question."
VOTE_QUESTION_NOT_FOUND = "That question doesn't exist."


@dataclass
class QuestionResults:
    question: QuestionDocument
    votes: list[int]
    user_vote: Optional[int]


class QuestionService:
    def __init__(
        self,
        questions: QuestionRepositoryProtocol,
        session_manager: SessionManager,
        vote_ledger: VoteLedger,
        story_service: StoryService,
    ):
        self.questions = questions
        self.session_manager = session_manager
        self.vote_ledger = vote_ledger
        self.story_service = story_service

    async def create(self, token: str, title: str, answers: list[str]) -> str:
        """Create a question owned by the caller and return its id."""
        author = await self.session_manager.resolve(token)
        question = await self.questions.create(title=title, answers=answers, author=author)
        logger.info("question_created", question_id=question.id, user_id=author)
        return question.id

    async def _caller_vote(self, token: Optional[str], question_id: str) -> Optional[VoteDocument]:
        # A stale or bogus token only hides the caller's own vote
        if not token:
            return None
        try:
            voter_id = await self.session_manager.resolve(token)
        except SessionNotFoundError:
            return None
        return await self.vote_ledger.get(voter_id, question_id)

    async def get(self, question_id: str, token: Optional[str] = None) -> QuestionResults:
        question, votes, user_vote = await asyncio.gather(
            self.questions.get_by_id(question_id),
            self.vote_ledger.count(question_id),
            self._caller_vote(token, question_id),
        )
        document_should_exist(question, QUESTION_NOT_FOUND)
        return QuestionResults(
            question=question,
            votes=votes,
            user_vote=user_vote.answer if user_vote else None,
        )

    async def _ensure_exists(self, question_id: str) -> None:
        document_should_exist(await self.questions.get_by_id(question_id), VOTE_QUESTION_NOT_FOUND)

    async def vote(self, token: str, question_id: str, answer: int, story_id: int) -> VoteDocument:
        """Cast the caller's vote after checking the session, question and story."""
        voter_id, _, _ = await asyncio.gather(
            self.session_manager.resolve(token),
            self._ensure_exists(question_id),
            self.story_service.ensure_exists(story_id),
        )
        return await self.vote_ledger.cast(voter_id, question_id, answer, story_id)
