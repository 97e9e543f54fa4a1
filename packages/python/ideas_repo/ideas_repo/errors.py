"""Domain-level errors for the ideas repository."""

from db_core.errors import DependencyError, NotFoundError, StoreError, ValidationError


class IdeaNotFoundError(NotFoundError):
    """Raised when an idea cannot be located."""


__all__ = [
    "StoreError",
    "ValidationError",
    "NotFoundError",
    "DependencyError",
    "IdeaNotFoundError",
]
