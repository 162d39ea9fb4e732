#!/usr/bin/env python3
"""
Initialize Cosmos DB Emulator with the DynamicStory database and containers.

This script creates the required database and containers in the local Cosmos DB Emulator.
Run this once after starting the emulator to set up the local development environment.

Prerequisites:
1. Install Cosmos DB Emulator: https://aka.ms/cosmosdb-emulator
2. Start the emulator (it runs on https://localhost:8081)
3. Run this script: python scripts/init-cosmos-emulator.py

The emulator uses a well-known key that is safe for local development only.
"""

import asyncio
import sys
from pathlib import Path

# Add backend to path
backend_path = Path(__file__).parent.parent / "src" / "backend"
sys.path.insert(0, str(backend_path))

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError

from db.cosmos_session import (
    ACTIVATION_LOOKUP_CONTAINER,
    COUNTERS_CONTAINER,
    EMAIL_LOOKUP_CONTAINER,
    FEEDBACK_CONTAINER,
    QUESTIONS_CONTAINER,
    SESSIONS_CONTAINER,
    STORIES_CONTAINER,
    USERNAME_LOOKUP_CONTAINER,
    USERS_CONTAINER,
    VOTES_CONTAINER,
)

# Cosmos DB Emulator connection details (well-known credentials)
EMULATOR_ENDPOINT = "https://localhost:8081"
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
DATABASE_NAME = "dynamicstory"

# Container definitions with partition keys. default_ttl -1 turns on per-item
# ttl without expiring anything by default; sessions set their own ttl.
CONTAINERS = [
    {"name": USERS_CONTAINER, "partition_key": "/id"},
    {"name": USERNAME_LOOKUP_CONTAINER, "partition_key": "/id"},
    {"name": EMAIL_LOOKUP_CONTAINER, "partition_key": "/id"},
    {"name": ACTIVATION_LOOKUP_CONTAINER, "partition_key": "/id"},
    {"name": SESSIONS_CONTAINER, "partition_key": "/id", "default_ttl": -1},
    {"name": VOTES_CONTAINER, "partition_key": "/question_id"},
    {"name": QUESTIONS_CONTAINER, "partition_key": "/id"},
    {"name": STORIES_CONTAINER, "partition_key": "/id"},
    {"name": FEEDBACK_CONTAINER, "partition_key": "/id"},
    {"name": COUNTERS_CONTAINER, "partition_key": "/id"},
]


async def init_emulator():
    """Initialize the Cosmos DB Emulator with required database and containers."""
    print(f"Connecting to Cosmos DB Emulator at {EMULATOR_ENDPOINT}...")

    # Disable SSL verification for emulator's self-signed certificate
    client = CosmosClient(
        url=EMULATOR_ENDPOINT,
        credential=EMULATOR_KEY,
        connection_verify=False,
    )

    try:
        print(f"\nCreating database: {DATABASE_NAME}")
        database = await client.create_database_if_not_exists(id=DATABASE_NAME)
        print(f"   Database '{DATABASE_NAME}' ready")

        print("\nCreating containers...")
        for container_def in CONTAINERS:
            container_name = container_def["name"]
            partition_key = container_def["partition_key"]
            extra = {}
            if "default_ttl" in container_def:
                extra["default_ttl"] = container_def["default_ttl"]

            await database.create_container_if_not_exists(
                id=container_name,
                partition_key=PartitionKey(path=partition_key),
                **extra,
            )
            print(f"   Container '{container_name}' (partition: {partition_key})")

        print("\nCosmos DB Emulator initialization complete!")
        print("\nNext steps:")
        print("   1. Set AZURE_COSMOS_CONNECTION_STRING and AZURE_COSMOS_DISABLE_SSL=true")
        print("   2. Start the pretty ID server: cd src/backend && uvicorn id_server:app --port 3001")
        print("   3. Start the API: cd src/backend && uvicorn main:app --reload")

    except CosmosHttpResponseError as e:
        print(f"\nError: {e.message}")
        print("\nTroubleshooting:")
        print("   1. Make sure Cosmos DB Emulator is running")
        print("   2. Open https://localhost:8081/_explorer/index.html in browser")
        print("   3. If certificate error, add exception or install emulator cert")
        raise
    finally:
        await client.close()


if __name__ == "__main__":
    print("=" * 60)
    print("DynamicStory - Cosmos DB Emulator Initialization")
    print("=" * 60)
    asyncio.run(init_emulator())
