"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.feed import router as feed_router
from api.v1.feedback import router as feedback_router
from api.v1.questions import router as questions_router
from api.v1.stories import router as stories_router
from api.v1.users import router as users_router

router = APIRouter()

router.include_router(users_router, prefix="/user", tags=["Users"])
router.include_router(questions_router, prefix="/question", tags=["Questions"])
router.include_router(stories_router, prefix="/story", tags=["Stories"])
router.include_router(feed_router, prefix="/feed", tags=["Feed"])
router.include_router(feedback_router, prefix="/feedback", tags=["Feedback"])
