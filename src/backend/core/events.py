"""
Application lifecycle event handlers.

Manages startup and shutdown tasks for the Cosmos DB client, the email
client and the background scheduler.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from db.cosmos_session import close_cosmos, init_cosmos

logger = structlog.get_logger(__name__)


class EmailNotConfiguredError(RuntimeError):
    """Production refuses to start without a working email transport."""


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info(f"Starting {settings.APP_NAME} API...")

        await init_cosmos()
        logger.info("Cosmos DB initialized")

        from services.email_service import email_service

        await email_service.initialize()
        if not email_service.is_available:
            if settings.is_production:
                raise EmailNotConfiguredError("Email configuration required for activation and feedback emails.")
            logger.warning("Email not configured. Activation and feedback emails are disabled.")

        from services.background_scheduler import start_scheduler

        await start_scheduler()

        logger.info(f"{settings.APP_NAME} API started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info(f"Shutting down {settings.APP_NAME} API...")

        from services.background_scheduler import stop_scheduler

        await stop_scheduler()

        from services.email_service import email_service

        await email_service.close()

        await close_cosmos()

        logger.info(f"{settings.APP_NAME} API shutdown complete")

    return stop_app
