"""
Azure Cosmos DB session management for document storage.

Uses async Cosmos DB SDK with DefaultAzureCredential for RBAC authentication.
This module provides a unified client for all Cosmos DB operations; every
helper wraps unexpected SDK failures in StorageError so callers only ever see
the application error taxonomy.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import (
    CosmosAccessConditionFailedError,
    CosmosHttpResponseError,
    CosmosResourceNotFoundError,
)
from azure.identity.aio import DefaultAzureCredential

from core.config import settings
from core.errors import StorageError

logger = logging.getLogger(__name__)

# Container names
USERS_CONTAINER = "users"
USERNAME_LOOKUP_CONTAINER = "username-lookup"
EMAIL_LOOKUP_CONTAINER = "email-lookup"
ACTIVATION_LOOKUP_CONTAINER = "activation-lookup"
SESSIONS_CONTAINER = "sessions"
VOTES_CONTAINER = "votes"
QUESTIONS_CONTAINER = "questions"
STORIES_CONTAINER = "stories"
FEEDBACK_CONTAINER = "feedback"
COUNTERS_CONTAINER = "counters"

# Global client instances (lazy-initialized)
_cosmos_client: CosmosClient | None = None
_database: DatabaseProxy | None = None
_credential: DefaultAzureCredential | None = None


async def get_cosmos_client() -> CosmosClient:
    """
    Get or create the Cosmos DB client.

    Supports two authentication modes:
    1. Connection string (for local development with Cosmos DB Emulator)
    2. DefaultAzureCredential/RBAC (for Azure deployment)

    The client is singleton and reused across requests.
    """
    global _cosmos_client, _credential

    if _cosmos_client is None:
        if settings.AZURE_COSMOS_CONNECTION_STRING:
            # Format: AccountEndpoint=https://...;AccountKey=...;
            conn_parts = dict(
                part.split("=", 1) for part in settings.AZURE_COSMOS_CONNECTION_STRING.split(";") if "=" in part
            )
            endpoint = conn_parts.get("AccountEndpoint", "")
            key = conn_parts.get("AccountKey", "")

            if not endpoint or not key:
                raise ValueError("AZURE_COSMOS_CONNECTION_STRING must contain AccountEndpoint and AccountKey")

            # Emulator uses a self-signed certificate
            _cosmos_client = CosmosClient(
                url=endpoint,
                credential=key,
                connection_verify=not settings.AZURE_COSMOS_DISABLE_SSL,
            )
            logger.info(
                f"Initialized Cosmos DB client for {endpoint} (connection string mode, "
                f"SSL verification: {not settings.AZURE_COSMOS_DISABLE_SSL})"
            )
        else:
            if not settings.AZURE_COSMOS_ENDPOINT:
                raise ValueError("Either AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING must be set")

            _credential = DefaultAzureCredential()
            _cosmos_client = CosmosClient(
                url=settings.AZURE_COSMOS_ENDPOINT,
                credential=_credential,
            )
            logger.info(f"Initialized Cosmos DB client for {settings.AZURE_COSMOS_ENDPOINT} (RBAC mode)")

    return _cosmos_client


async def get_database() -> DatabaseProxy:
    """Get the Cosmos DB database proxy."""
    global _database

    if _database is None:
        client = await get_cosmos_client()
        _database = client.get_database_client(settings.AZURE_COSMOS_DATABASE)
        logger.info(f"Connected to database: {settings.AZURE_COSMOS_DATABASE}")

    return _database


async def get_container(container_name: str) -> ContainerProxy:
    """Get a container proxy for the specified container."""
    database = await get_database()
    return database.get_container_client(container_name)


@asynccontextmanager
async def cosmos_errors() -> AsyncGenerator[None, None]:
    """Translate any Cosmos SDK failure into StorageError."""
    try:
        yield
    except CosmosHttpResponseError as e:
        logger.error(f"Cosmos DB operation failed: {e.status_code} {e.message}")
        raise StorageError(e) from e


async def init_cosmos() -> None:
    """Create the client eagerly so misconfiguration fails at startup."""
    await get_database()


async def close_cosmos() -> None:
    """
    Close Cosmos DB connections.

    Should be called during application shutdown.
    """
    global _cosmos_client, _database, _credential

    if _cosmos_client is not None:
        await _cosmos_client.close()
        _cosmos_client = None
        _database = None
        logger.info("Closed Cosmos DB client")

    if _credential is not None:
        await _credential.close()
        _credential = None


# ============================================================================
# Utility Functions for Common Operations
# ============================================================================


async def create_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    """
    Create a new item in the specified container.

    A duplicate id (HTTP 409) is a unique-constraint violation and surfaces
    as StorageError like any other failed write.
    """
    container = await get_container(container_name)
    async with cosmos_errors():
        return await container.create_item(body=item)


async def read_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> dict[str, Any] | None:
    """Read an item by ID and partition key. Returns None if not found."""
    container = await get_container(container_name)
    async with cosmos_errors():
        try:
            return await container.read_item(item=item_id, partition_key=partition_key)
        except CosmosResourceNotFoundError:
            return None


async def patch_item(
    container_name: str,
    item_id: str,
    partition_key: str,
    operations: list[dict[str, Any]],
    filter_predicate: str | None = None,
) -> dict[str, Any] | None:
    """
    Atomically apply patch operations to one item.

    Returns the updated item, or None when the item doesn't exist or doesn't
    satisfy filter_predicate (HTTP 404 / 412).

    Example:
        await patch_item(
            'counters', 'story-pretty-id', 'story-pretty-id',
            [{'op': 'incr', 'path': '/value', 'value': 1}],
        )
    """
    container = await get_container(container_name)
    kwargs: dict[str, Any] = {}
    if filter_predicate:
        kwargs["filter_predicate"] = filter_predicate

    async with cosmos_errors():
        try:
            return await container.patch_item(
                item=item_id,
                partition_key=partition_key,
                patch_operations=operations,
                **kwargs,
            )
        except (CosmosResourceNotFoundError, CosmosAccessConditionFailedError):
            return None


async def delete_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> bool:
    """Delete an item by ID and partition key. Returns False if it was already gone."""
    container = await get_container(container_name)
    async with cosmos_errors():
        try:
            await container.delete_item(item=item_id, partition_key=partition_key)
        except CosmosResourceNotFoundError:
            return False
    return True


async def query_items(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
    max_items: int | None = None,
) -> list[dict[str, Any]]:
    """
    Query items using SQL-like syntax.

    Example:
        results = await query_items(
            'sessions',
            'SELECT * FROM c WHERE c.owner = @owner',
            parameters=[{'name': '@owner', 'value': user_id}]
        )
    """
    container = await get_container(container_name)

    # Cross-partition queries are enabled automatically when no partition_key is given
    query_kwargs: dict[str, Any] = {
        "query": query,
    }

    if parameters:
        query_kwargs["parameters"] = parameters

    if partition_key:
        query_kwargs["partition_key"] = partition_key

    if max_items:
        query_kwargs["max_item_count"] = max_items

    items: list[dict[str, Any]] = []
    async with cosmos_errors():
        async for item in container.query_items(**query_kwargs):
            items.append(item)
            if max_items and len(items) >= max_items:
                break

    return items


async def query_count(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
) -> int:
    """
    Execute a COUNT query and return the integer result.

    This is a convenience wrapper for queries using SELECT VALUE COUNT(1).
    """
    results = await query_items(container_name, query, parameters, partition_key)
    if results and len(results) > 0:
        result = results[0]
        if isinstance(result, (int, float)):
            return int(result)
        return 0
    return 0
