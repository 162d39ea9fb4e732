"""
Question and vote Pydantic schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from core.config import settings
from models.cosmos_documents import ANSWER_COUNT
from schemas.common import MessageResponse


class QuestionCreate(BaseModel):
    """A question with exactly five distinct answers."""

    title: str = Field(
        ...,
        min_length=settings.QUESTION_TITLE_MIN_LENGTH,
        max_length=settings.QUESTION_TITLE_MAX_LENGTH,
    )
    answers: list[str] = Field(..., min_length=ANSWER_COUNT, max_length=ANSWER_COUNT)

    @field_validator("answers")
    @classmethod
    def validate_answers(cls, answers: list[str]) -> list[str]:
        for answer in answers:
            if not settings.ANSWER_MIN_LENGTH <= len(answer) <= settings.ANSWER_MAX_LENGTH:
                raise ValueError(
                    f"Answers must be between {settings.ANSWER_MIN_LENGTH} and "
                    f"{settings.ANSWER_MAX_LENGTH} characters."
                )
        if len(set(answers)) != len(answers):
            raise ValueError("Answers must be unique.")
        return answers


class VoteCreate(BaseModel):
    story: int = Field(..., ge=1)
    answer: int = Field(..., ge=0, le=ANSWER_COUNT - 1)


class AnswerTally(BaseModel):
    name: str
    votes: int


class QuestionCreatedResponse(MessageResponse):
    question: str


class QuestionResponse(MessageResponse):
    title: str
    answers: list[AnswerTally]
    userVote: Optional[int] = None
