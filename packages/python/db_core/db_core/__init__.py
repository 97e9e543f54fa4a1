"""Minimal MongoDB helpers shared across domain repositories.

Example usage in a domain repository:

    from db_core import dependency_errors, get_db

    async def list_ideas():
        db = get_db()
        with dependency_errors("list ideas"):
            return await db["ideas"].find({"user_id": "user-123"}).to_list(length=100)
"""

from .errors import (
    DependencyError,
    NotFoundError,
    StoreError,
    ValidationError,
    dependency_errors,
)
from .logging_config import configure_logging
from .mongo import get_db, get_mongo_client
from .settings import MongoSettings, settings

__all__ = [
    "MongoSettings",
    "settings",
    "get_mongo_client",
    "get_db",
    "configure_logging",
    "StoreError",
    "ValidationError",
    "NotFoundError",
    "DependencyError",
    "dependency_errors",
]
