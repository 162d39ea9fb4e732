"""
DynamicStory pretty ID server.

A separate process that owns the story pretty ID counter. Every
POST {PRETTY_ID_PATH} answers with the next ID as plain text.

Run it next to the API, for example:
    uvicorn id_server:app --port 3001
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from core.config import settings
from core.exception_handlers import register_exception_handlers
from db.cosmos_session import close_cosmos, init_cosmos
from repositories.provider import get_counter_repository
from services.pretty_id_service import PrettyIdAllocator

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting pretty ID server...")
    await init_cosmos()
    allocator = PrettyIdAllocator(get_counter_repository())
    await allocator.start()
    app.state.allocator = allocator
    logger.info("Pretty ID server started", path=settings.PRETTY_ID_PATH)
    yield
    await allocator.stop()
    await close_cosmos()
    logger.info("Pretty ID server shutdown complete")


def create_id_application() -> FastAPI:
    application = FastAPI(
        title=f"{settings.APP_NAME} pretty ID server",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    @application.post(settings.PRETTY_ID_PATH, response_class=PlainTextResponse)
    async def next_pretty_id(request: Request) -> str:
        """Allocate the next story pretty ID."""
        allocator: PrettyIdAllocator = request.app.state.allocator
        return str(await allocator.next())

    @application.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "dynamicstory-id-server"}

    register_exception_handlers(application)

    return application


app = create_id_application()
