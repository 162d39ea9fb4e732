"""
Feedback Pydantic schemas.
"""

from pydantic import BaseModel, Field

from core.config import settings


class FeedbackSubmit(BaseModel):
    feedback: str = Field(..., min_length=settings.FEEDBACK_MIN_LENGTH)
