"""
Cosmos DB User repository.

Handles user CRUD operations using Azure Cosmos DB with secondary indexes
for username, email and activation ID lookups. Each lookup document's id is
the unique value itself, so the store rejects a second claim on it.
"""

import logging
from typing import Optional

from core.errors import StorageError
from db.cosmos_session import (
    ACTIVATION_LOOKUP_CONTAINER,
    EMAIL_LOOKUP_CONTAINER,
    USERNAME_LOOKUP_CONTAINER,
    USERS_CONTAINER,
    create_item,
    delete_item,
    patch_item,
    query_items,
    read_item,
)
from models.cosmos_documents import LookupDocument, UserDocument

logger = logging.getLogger(__name__)


class CosmosUserRepository:
    """Repository for user operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_id(self, user_id: str) -> Optional[UserDocument]:
        """Get a user by ID (direct point read - very efficient)."""
        data = await read_item(USERS_CONTAINER, user_id, partition_key=user_id)
        if data is None:
            return None
        return UserDocument(**data)

    async def get_by_ids(self, user_ids: list[str]) -> list[UserDocument]:
        """Get a set of users. Duplicate ids yield a single user."""
        unique_ids = list(dict.fromkeys(user_ids))
        if not unique_ids:
            return []
        query = """
            SELECT * FROM c
            WHERE ARRAY_CONTAINS(@ids, c.id)
        """
        results = await query_items(
            USERS_CONTAINER,
            query,
            parameters=[{"name": "@ids", "value": unique_ids}],
        )
        return [UserDocument(**r) for r in results]

    async def _get_by_lookup(self, container_name: str, key: str) -> Optional[UserDocument]:
        """Resolve a lookup entry, then point read the user it references."""
        lookup_data = await read_item(container_name, key, partition_key=key)
        if lookup_data is None:
            return None

        user_id = lookup_data.get("user_id")
        if not user_id:
            return None

        return await self.get_by_id(user_id)

    async def get_by_email(self, email: str) -> Optional[UserDocument]:
        """Get a user by email (case-insensitive), deleted or not."""
        return await self._get_by_lookup(EMAIL_LOOKUP_CONTAINER, email.lower())

    async def get_by_username(self, username: str) -> Optional[UserDocument]:
        """Get a user by username (case-insensitive), deleted or not."""
        return await self._get_by_lookup(USERNAME_LOOKUP_CONTAINER, username.lower())

    async def username_exists(self, username: str) -> bool:
        """Check if a username is taken, ignoring case. Deleted users still hold theirs."""
        key = username.lower()
        lookup_data = await read_item(USERNAME_LOOKUP_CONTAINER, key, partition_key=key)
        return lookup_data is not None

    async def email_exists(self, email: str) -> bool:
        """Check if an email is registered, ignoring case. Deleted users still hold theirs."""
        key = email.lower()
        lookup_data = await read_item(EMAIL_LOOKUP_CONTAINER, key, partition_key=key)
        return lookup_data is not None

    async def activation_id_exists(self, activation_id: str) -> bool:
        """Check if an activation ID is currently assigned."""
        lookup_data = await read_item(ACTIVATION_LOOKUP_CONTAINER, activation_id, partition_key=activation_id)
        return lookup_data is not None

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        activation_id: str,
    ) -> UserDocument:
        """
        Create a new user with secondary indexes.

        The lookup documents are written first so a concurrent registration
        for the same username or email loses at the store before any user
        document exists. Lookups created before a failure are rolled back.
        """
        user = UserDocument(
            username=username,
            username_lower=username.lower(),
            email=email.lower(),
            password_hash=password_hash,
            activation_id=activation_id,
        )

        lookups = [
            (USERNAME_LOOKUP_CONTAINER, user.username_lower),
            (EMAIL_LOOKUP_CONTAINER, user.email),
            (ACTIVATION_LOOKUP_CONTAINER, activation_id),
        ]
        created: list[tuple[str, str]] = []
        try:
            for container_name, key in lookups:
                lookup = LookupDocument(id=key, user_id=user.id)
                await create_item(container_name, lookup.model_dump(mode="json"))
                created.append((container_name, key))
            await create_item(USERS_CONTAINER, user.model_dump(mode="json"))
        except StorageError:
            for container_name, key in created:
                try:
                    await delete_item(container_name, key, partition_key=key)
                except StorageError as e:
                    logger.warning(f"Failed to roll back {container_name} entry for user {user.id}: {e.cause}")
            raise

        logger.info(f"Created user {user.id}")
        return user

    async def update_password(self, user_id: str, password_hash: str) -> Optional[UserDocument]:
        """Replace a user's password hash. Returns None if the user doesn't exist."""
        data = await patch_item(
            USERS_CONTAINER,
            user_id,
            partition_key=user_id,
            operations=[{"op": "set", "path": "/password_hash", "value": password_hash}],
        )
        if data is None:
            return None
        return UserDocument(**data)

    async def mark_deleted(self, user_id: str) -> Optional[UserDocument]:
        """Soft delete a user. Username and email stay reserved."""
        data = await patch_item(
            USERS_CONTAINER,
            user_id,
            partition_key=user_id,
            operations=[{"op": "set", "path": "/is_deleted", "value": True}],
        )
        if data is None:
            return None
        logger.info(f"Soft deleted user {user_id}")
        return UserDocument(**data)

    async def activate(self, activation_id: str) -> Optional[UserDocument]:
        """
        Activate the user holding an activation ID and clear the ID.

        The user update is conditional on the ID still being assigned, so of
        two concurrent activations only one succeeds.
        """
        if not activation_id.isalnum():
            return None

        lookup_data = await read_item(ACTIVATION_LOOKUP_CONTAINER, activation_id, partition_key=activation_id)
        if lookup_data is None:
            return None
        user_id = lookup_data["user_id"]

        data = await patch_item(
            USERS_CONTAINER,
            user_id,
            partition_key=user_id,
            operations=[
                {"op": "set", "path": "/is_activated", "value": True},
                {"op": "set", "path": "/activation_id", "value": None},
            ],
            filter_predicate=f"FROM c WHERE c.activation_id = '{activation_id}'",
        )
        # The ID is spent either way
        await delete_item(ACTIVATION_LOOKUP_CONTAINER, activation_id, partition_key=activation_id)

        if data is None:
            return None
        logger.info(f"Activated user {user_id}")
        return UserDocument(**data)
