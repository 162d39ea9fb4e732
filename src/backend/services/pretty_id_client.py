"""
Client for the pretty ID server.

The server answers POST {PRETTY_ID_PATH} with a plain-text positive integer.
Anything else is a server error; the request is never retried because a
retry could consume a second ID.
"""

from typing import Optional

import httpx
import structlog

from core.config import settings
from core.errors import ServerError

logger = structlog.get_logger(__name__)

PRETTY_ID_ERROR = "Internal server error."


class PrettyIdClient:
    """Fetches the next story pretty ID over HTTP."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or settings.pretty_id_url
        self.timeout = timeout or settings.PRETTY_ID_TIMEOUT_SECONDS

    async def next_id(self) -> int:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url)
        except httpx.HTTPError as e:
            raise ServerError(PRETTY_ID_ERROR, e) from e

        if response.status_code != 200:
            raise ServerError(
                PRETTY_ID_ERROR,
                RuntimeError(f"Pretty ID server gave error {response.status_code}"),
            )

        body = response.text.strip()
        if not body:
            raise ServerError(PRETTY_ID_ERROR, RuntimeError("Pretty ID server gave empty response"))

        try:
            pretty_id = int(body)
        except ValueError as e:
            raise ServerError(PRETTY_ID_ERROR, e) from e

        if pretty_id < 1:
            raise ServerError(
                PRETTY_ID_ERROR,
                RuntimeError(f"Pretty ID server gave non-positive response {pretty_id}"),
            )

        logger.debug("pretty_id_received", pretty_id=pretty_id)
        return pretty_id
