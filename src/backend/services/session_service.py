"""
Session Manager.

Creates, resolves, expires and revokes login sessions. A session is valid
only while its expiration date is strictly in the future; Cosmos purges it
through the item ttl and the background reaper removes anything left over.
Expired, destroyed, unknown and malformed tokens all look the same to the
caller: "Couldn't find session.".
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog

from core.config import settings
from core.errors import SessionNotFoundError
from core.security import decode_token, encode_nonce, generate_unique, random_bytes
from models.cosmos_documents import SessionDocument, utcnow
from repositories.provider import SessionRepositoryProtocol

logger = structlog.get_logger(__name__)


def session_ttl_ms(session: SessionDocument, now: Optional[datetime] = None) -> int:
    """Milliseconds until a session expires, as reported to clients."""
    remaining = session.expiration_date - (now or utcnow())
    return max(0, int(remaining.total_seconds() * 1000))


class SessionManager:
    """Owns session nonces: generation with collision retry, lookup and removal."""

    def __init__(self, sessions: SessionRepositoryProtocol):
        self.sessions = sessions

    async def _generate_nonce(self) -> bytes:
        return await generate_unique(
            lambda: random_bytes(settings.SESSION_NONCE_BYTES),
            self.sessions.nonce_exists,
        )

    async def create(self, user_id: str) -> SessionDocument:
        """Start a new session for a user and return it."""
        nonce = await self._generate_nonce()
        expiration_date = utcnow() + timedelta(seconds=settings.SESSION_TTL_SECONDS)
        session = await self.sessions.create(
            owner=user_id,
            nonce=nonce,
            expiration_date=expiration_date,
            ttl=settings.SESSION_TTL_SECONDS,
        )
        logger.info("session_created", user_id=user_id)
        return session

    async def resolve(self, token: Optional[str]) -> str:
        """
        Translate a token into the id of the user it belongs to.

        Does not extend the session.
        """
        nonce = decode_token(token)
        if nonce is None:
            raise SessionNotFoundError()

        session = await self.sessions.get_by_nonce(nonce)
        if session is None or not session.is_live():
            raise SessionNotFoundError()
        return session.owner

    async def destroy(self, token: Optional[str]) -> SessionDocument:
        """Delete the session behind a token and return what it held."""
        nonce = decode_token(token)
        if nonce is None:
            raise SessionNotFoundError()

        session = await self.sessions.delete_by_nonce(nonce)
        if session is None or not session.is_live():
            # An expired leftover is removed but still reported as missing
            raise SessionNotFoundError()
        logger.info("session_destroyed", user_id=session.owner)
        return session

    async def destroy_all(self, user_id: str) -> int:
        """Delete every session of a user. Having none is fine."""
        removed = await self.sessions.delete_by_owner(user_id)
        logger.info("sessions_destroyed", user_id=user_id, count=removed)
        return removed

    async def reauthenticate(self, token: Optional[str]) -> SessionDocument:
        """
        Swap a session for a fresh one.

        The old session is gone before the new one exists, so a failure in
        between leaves the user logged out.
        """
        old = await self.destroy(token)
        return await self.create(old.owner)

    async def purge_expired(self) -> int:
        """Remove sessions whose expiration has passed."""
        now_epoch = int(datetime.now(timezone.utc).timestamp())
        expired_ids = await self.sessions.get_expired_ids(now_epoch)
        removed = 0
        for session_id in expired_ids:
            if await self.sessions.delete_by_id(session_id):
                removed += 1
        if removed:
            logger.info("expired_sessions_purged", count=removed)
        return removed


def token_for(session: SessionDocument) -> str:
    """Token handed to the client for a session."""
    return encode_nonce(session.nonce_bytes)
