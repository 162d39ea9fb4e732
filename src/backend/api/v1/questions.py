"""
Question endpoints: create, read with tallies, and vote.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from api.deps import get_optional_token, get_question_service, get_token
from schemas.common import MessageResponse
from schemas.question import (
    AnswerTally,
    QuestionCreate,
    QuestionCreatedResponse,
    QuestionResponse,
    VoteCreate,
)
from services.question_service import QuestionService

router = APIRouter()


@router.post("", response_model=QuestionCreatedResponse)
async def create_question(
    body: QuestionCreate,
    token: Annotated[str, Depends(get_token)],
    questions: Annotated[QuestionService, Depends(get_question_service)],
) -> QuestionCreatedResponse:
    question_id = await questions.create(token, body.title, body.answers)
    return QuestionCreatedResponse(message="Question created.", question=question_id)


@router.get("/{question_id}", response_model=QuestionResponse)
async def get_question(
    question_id: str,
    token: Annotated[Optional[str], Depends(get_optional_token)],
    questions: Annotated[QuestionService, Depends(get_question_service)],
) -> QuestionResponse:
    """
    Get a question and its vote tallies.

    The caller's own vote is included when a live session token is sent.
    """
    results = await questions.get(question_id, token)
    return QuestionResponse(
        message="Here's the question.",
        title=results.question.title,
        answers=[
            AnswerTally(name=name, votes=votes)
            for name, votes in zip(results.question.answers, results.votes)
        ],
        userVote=results.user_vote,
    )


@router.post("/{question_id}/vote", response_model=MessageResponse)
async def vote_on_question(
    question_id: str,
    body: VoteCreate,
    token: Annotated[str, Depends(get_token)],
    questions: Annotated[QuestionService, Depends(get_question_service)],
) -> MessageResponse:
    await questions.vote(token, question_id, body.answer, body.story)
    return MessageResponse(message="Voted.")
