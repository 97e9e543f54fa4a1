"""Domain-level errors for the sketch image store."""

from db_core.errors import NotFoundError


class ImageNotFoundError(NotFoundError):
    """Raised when a sketch image cannot be located."""
