"""
Cosmos DB Session repository.

Sessions are keyed by the SHA-256 digest of their nonce, so existence checks
and lookups are point reads and the store itself rejects a duplicate nonce.
"""

import asyncio
import base64
import logging
from datetime import datetime
from typing import Optional

from core.security import nonce_key
from db.cosmos_session import (
    SESSIONS_CONTAINER,
    create_item,
    delete_item,
    query_items,
    read_item,
)
from models.cosmos_documents import SessionDocument

logger = logging.getLogger(__name__)


class CosmosSessionRepository:
    """Repository for session operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_nonce(self, nonce: bytes) -> Optional[SessionDocument]:
        """Get a session by nonce, whether or not it has expired."""
        key = nonce_key(nonce)
        data = await read_item(SESSIONS_CONTAINER, key, partition_key=key)
        if data is None:
            return None
        return SessionDocument(**data)

    async def nonce_exists(self, nonce: bytes) -> bool:
        """Check if a nonce is already used by any stored session."""
        return await self.get_by_nonce(nonce) is not None

    async def get_ids_by_owner(self, owner: str) -> list[str]:
        """Get the ids of every session owned by a user (cross-partition)."""
        query = """
            SELECT c.id FROM c
            WHERE c.owner = @owner
        """
        results = await query_items(
            SESSIONS_CONTAINER,
            query,
            parameters=[{"name": "@owner", "value": owner}],
        )
        return [r["id"] for r in results]

    async def get_expired_ids(self, now_epoch: int) -> list[str]:
        """
        Get the ids of sessions past their expiration.

        Sessions are never updated after creation, so _ts + ttl is exactly
        the expiration time in epoch seconds.
        """
        query = """
            SELECT c.id FROM c
            WHERE c._ts + c.ttl <= @now
        """
        results = await query_items(
            SESSIONS_CONTAINER,
            query,
            parameters=[{"name": "@now", "value": now_epoch}],
        )
        return [r["id"] for r in results]

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, owner: str, nonce: bytes, expiration_date: datetime, ttl: int) -> SessionDocument:
        """Persist a new session."""
        session = SessionDocument(
            id=nonce_key(nonce),
            owner=owner,
            nonce=base64.b64encode(nonce).decode("ascii"),
            expiration_date=expiration_date,
            ttl=ttl,
        )
        await create_item(SESSIONS_CONTAINER, session.model_dump(mode="json"))
        logger.debug(f"Created session for user {owner}")
        return session

    async def delete_by_nonce(self, nonce: bytes) -> Optional[SessionDocument]:
        """Delete a session and return it, or None if there was no such session."""
        session = await self.get_by_nonce(nonce)
        if session is None:
            return None
        if not await delete_item(SESSIONS_CONTAINER, session.id, partition_key=session.id):
            # Deleted concurrently by someone else
            return None
        return session

    async def delete_by_id(self, session_id: str) -> bool:
        """Delete a session by its document id."""
        return await delete_item(SESSIONS_CONTAINER, session_id, partition_key=session_id)

    async def delete_by_owner(self, owner: str) -> int:
        """Delete every session owned by a user. Returns how many were removed."""
        session_ids = await self.get_ids_by_owner(owner)
        removed = await asyncio.gather(*(self.delete_by_id(session_id) for session_id in session_ids))
        return sum(1 for r in removed if r)
