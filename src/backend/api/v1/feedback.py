"""
Feedback endpoint.

Feedback goes to the team inbox by email and is stored alongside.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import get_feedback_service, get_token
from schemas.common import MessageResponse
from schemas.feedback import FeedbackSubmit
from services.feedback_service import FeedbackService

router = APIRouter()


@router.post("", response_model=MessageResponse)
async def submit_feedback(
    body: FeedbackSubmit,
    token: Annotated[str, Depends(get_token)],
    feedback: Annotated[FeedbackService, Depends(get_feedback_service)],
) -> MessageResponse:
    await feedback.give(token, body.feedback)
    return MessageResponse(message="Thanks for the feedback!")
