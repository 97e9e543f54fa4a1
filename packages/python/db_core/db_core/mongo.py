"""Process-wide Motor client for the idea and sketch stores.

The client is created lazily from ``MongoSettings`` and shared by every
repository; ``get_db()`` hands out the configured database.
"""

from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .settings import settings


@lru_cache
def get_mongo_client() -> AsyncIOMotorClient:
    """Shared Motor client; it connects on first use, not on construction."""

    return AsyncIOMotorClient(
        settings.uri,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
    )


def get_db() -> AsyncIOMotorDatabase:
    """Database holding the ideas, categories and images collections."""

    client = get_mongo_client()
    return client[settings.db_name]
