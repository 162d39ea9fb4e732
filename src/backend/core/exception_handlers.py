"""
Exception handlers shared by the API and the pretty ID server.

This is the only place errors get logged: server errors once, with their
cause chain; client errors never as faults.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.config import settings
from core.errors import ClientError, ServerError, SessionNotFoundError

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error."


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    message = str(first.get("msg", "Invalid request."))
    # pydantic prefixes messages raised from validators
    message = message.removeprefix("Value error, ")
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


def register_exception_handlers(application: FastAPI) -> None:
    """Map the error taxonomy onto {"code", "message"} responses."""

    @application.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
        headers = None
        if isinstance(exc, SessionNotFoundError):
            headers = {"WWW-Authenticate": "Bearer"}
        logger.info("client_error", path=request.url.path, message=exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.result, headers=headers)

    @application.exception_handler(ServerError)
    async def server_error_handler(request: Request, exc: ServerError) -> JSONResponse:
        logger.error(
            "server_error",
            path=request.url.path,
            method=request.method,
            message=exc.message,
            cause=repr(exc.cause) if exc.cause else None,
            exc_info=exc,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.result)

    @application.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"code": status.HTTP_400_BAD_REQUEST, "message": _validation_message(exc)},
        )

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler to catch unhandled exceptions.

        Even unexpected errors get the JSON envelope, and the CORS middleware
        still adds its headers to the response.
        """
        logger.exception(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )
        content = {"code": status.HTTP_500_INTERNAL_SERVER_ERROR, "message": INTERNAL_ERROR_MESSAGE}
        if settings.DEBUG:
            content["error_type"] = type(exc).__name__
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
