"""
Background Scheduler Service

Manages scheduled background tasks using APScheduler:
- Session reaper (removes expired sessions the store hasn't purged yet)

This runs in-process with the FastAPI application.
"""

import logging
from datetime import timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from core.errors import ServerError
from repositories.provider import get_session_repository
from services.session_service import SessionManager

logger = logging.getLogger(__name__)

# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None


async def session_reaper_job() -> int:
    """
    Background job deleting expired sessions.

    Expired sessions already fail resolution; this only keeps the
    container from growing when the store's TTL purge lags behind.
    """
    logger.info("Starting session reaper job...")

    try:
        removed = await SessionManager(get_session_repository()).purge_expired()
    except ServerError as e:
        logger.error(f"Session reaper job failed: {e.message}", exc_info=True)
        return 0

    logger.info(f"Session reaper completed: removed={removed}")
    return removed


def get_scheduler() -> AsyncIOScheduler:
    """Get the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(timezone=timezone.utc)
    return _scheduler


async def start_scheduler() -> None:
    """Start the background scheduler with all jobs."""
    if not settings.SESSION_REAPER_ENABLED:
        logger.info("Session reaper disabled, not starting scheduler")
        return

    scheduler = get_scheduler()

    if scheduler.running:
        logger.info("Scheduler already running")
        return

    logger.info("Configuring background scheduler...")

    scheduler.add_job(
        session_reaper_job,
        trigger=IntervalTrigger(minutes=settings.SESSION_REAPER_INTERVAL_MINUTES),
        id="session_reaper",
        name="Session Reaper",
        replace_existing=True,
        max_instances=1,
    )
    logger.info(f"Added session reaper job (every {settings.SESSION_REAPER_INTERVAL_MINUTES} minutes)")

    scheduler.start()
    logger.info("Background scheduler started")


async def stop_scheduler() -> None:
    """Stop the background scheduler gracefully."""
    global _scheduler

    if _scheduler and _scheduler.running:
        logger.info("Stopping background scheduler...")
        _scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")

    _scheduler = None
