"""Configuration helpers for MongoDB connections used by db_core.

Values are read from the environment (and the nearest ``.env`` file) when the
module is imported, so set ``MONGO_URI`` / ``MONGO_DB_NAME`` before the first
call to ``get_db``.
"""
import os

from dotenv import find_dotenv, load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

# Search for the nearest .env so running from subdirectories still loads root config.
load_dotenv(find_dotenv(usecwd=True))


class MongoSettings(BaseModel):
    """Basic MongoDB configuration for the ideas and sketch stores."""

    uri: str = Field(
        default_factory=lambda: os.getenv("MONGO_URI", "mongodb://localhost:27017")
    )
    db_name: str = Field(default_factory=lambda: os.getenv("MONGO_DB_NAME", "sketch_ideas"))
    server_selection_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"))
    )


def _default_settings() -> "MongoSettings":
    return MongoSettings()


settings: MongoSettings = _default_settings()
logger.info(
    "MongoSettings initialized with uri={uri} db_name={db_name}",
    uri=settings.uri,
    db_name=settings.db_name,
)
