"""
Tests for Cosmos DB session repository.
"""

import base64
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from core.security import nonce_key

NONCE = b"\x00\x01nonce-bytes"


@pytest.fixture
def stored_session():
    """A session document as Cosmos returns it."""
    return {
        "id": nonce_key(NONCE),
        "owner": "user-1",
        "nonce": base64.b64encode(NONCE).decode("ascii"),
        "expiration_date": (datetime.now(timezone.utc) + timedelta(days=2)).isoformat(),
        "ttl": 172800,
        "_ts": 1700000000,
    }


@pytest.mark.unit
class TestCosmosSessionRepository:
    """Test CosmosSessionRepository operations."""

    async def test_get_by_nonce_is_point_read(self, stored_session) -> None:
        from repositories.cosmos_session_repository import CosmosSessionRepository

        with patch("repositories.cosmos_session_repository.read_item") as mock_read:
            mock_read.return_value = stored_session

            session = await CosmosSessionRepository().get_by_nonce(NONCE)

        key = nonce_key(NONCE)
        mock_read.assert_awaited_once_with("sessions", key, partition_key=key)
        assert session.owner == "user-1"
        assert session.nonce_bytes == NONCE

    async def test_nonce_exists_false(self) -> None:
        from repositories.cosmos_session_repository import CosmosSessionRepository

        with patch("repositories.cosmos_session_repository.read_item", return_value=None):
            assert await CosmosSessionRepository().nonce_exists(NONCE) is False

    async def test_create_stores_digest_id_and_ttl(self) -> None:
        from repositories.cosmos_session_repository import CosmosSessionRepository

        expiration = datetime.now(timezone.utc) + timedelta(days=2)
        with patch("repositories.cosmos_session_repository.create_item") as mock_create:
            session = await CosmosSessionRepository().create("user-1", NONCE, expiration, 172800)

        container, body = mock_create.await_args.args
        assert container == "sessions"
        assert body["id"] == nonce_key(NONCE)
        assert body["ttl"] == 172800
        assert base64.b64decode(body["nonce"]) == NONCE
        assert session.expiration_date == expiration

    async def test_delete_by_nonce_missing(self) -> None:
        from repositories.cosmos_session_repository import CosmosSessionRepository

        with patch("repositories.cosmos_session_repository.read_item", return_value=None):
            with patch("repositories.cosmos_session_repository.delete_item") as mock_delete:
                assert await CosmosSessionRepository().delete_by_nonce(NONCE) is None
        mock_delete.assert_not_awaited()

    async def test_delete_by_nonce_lost_race(self, stored_session) -> None:
        """Test a session deleted concurrently reports as not found."""
        from repositories.cosmos_session_repository import CosmosSessionRepository

        with patch("repositories.cosmos_session_repository.read_item", return_value=stored_session):
            with patch("repositories.cosmos_session_repository.delete_item", return_value=False):
                assert await CosmosSessionRepository().delete_by_nonce(NONCE) is None

    async def test_delete_by_owner(self) -> None:
        from repositories.cosmos_session_repository import CosmosSessionRepository

        with patch("repositories.cosmos_session_repository.query_items") as mock_query:
            mock_query.return_value = [{"id": "a"}, {"id": "b"}, {"id": "c"}]
            with patch(
                "repositories.cosmos_session_repository.delete_item",
                AsyncMock(side_effect=[True, False, True]),
            ):
                removed = await CosmosSessionRepository().delete_by_owner("user-1")

        assert removed == 2
        assert mock_query.await_args.kwargs["parameters"] == [{"name": "@owner", "value": "user-1"}]

    async def test_get_expired_ids(self) -> None:
        from repositories.cosmos_session_repository import CosmosSessionRepository

        with patch("repositories.cosmos_session_repository.query_items") as mock_query:
            mock_query.return_value = [{"id": "old"}]

            ids = await CosmosSessionRepository().get_expired_ids(1700000000)

        assert ids == ["old"]
        assert mock_query.await_args.kwargs["parameters"] == [{"name": "@now", "value": 1700000000}]
