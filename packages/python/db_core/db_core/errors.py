"""Error taxonomy shared by the ideas and sketch repositories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from loguru import logger
from pymongo.errors import DuplicateKeyError, PyMongoError


class StoreError(Exception):
    """Base class for every error raised by the persistence layer."""


class ValidationError(StoreError, ValueError):
    """Raised when input is malformed or misses required values."""


class NotFoundError(StoreError, LookupError):
    """Raised when a referenced record does not exist."""


class DependencyError(StoreError):
    """Raised when the database or another backing store fails."""


@contextmanager
def dependency_errors(action: str) -> Iterator[None]:
    """
    Translate driver failures raised inside the block into ``DependencyError``.

    ``DuplicateKeyError`` passes through untouched because callers use it to
    detect find-or-create races.
    """

    try:
        yield
    except DuplicateKeyError:
        raise
    except PyMongoError as exc:
        logger.error("Mongo call failed while trying to {action}: {error}", action=action, error=exc)
        raise DependencyError(f"Failed to {action}: {exc}") from exc
