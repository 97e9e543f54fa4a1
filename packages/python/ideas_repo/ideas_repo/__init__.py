"""Ideas repository: ideas with categories, tags and an optional sketch."""

from .categories import load_categories, resolve_categories
from .errors import (
    DependencyError,
    IdeaNotFoundError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .fanout import FanOutResult, gather_best_effort
from .models import (
    CategoryRef,
    DeleteResult,
    Idea,
    IdeaCreate,
    IdeaUpdate,
    IdeaWithImage,
    IdeaWithPreviews,
    IdeaWithSketches,
    Tag,
)
from .repo import IdeaRepository, ensure_indexes

__all__ = [
    "CategoryRef",
    "DeleteResult",
    "Idea",
    "IdeaCreate",
    "IdeaUpdate",
    "IdeaWithImage",
    "IdeaWithPreviews",
    "IdeaWithSketches",
    "Tag",
    "IdeaRepository",
    "ensure_indexes",
    "resolve_categories",
    "load_categories",
    "gather_best_effort",
    "FanOutResult",
    "StoreError",
    "ValidationError",
    "NotFoundError",
    "DependencyError",
    "IdeaNotFoundError",
]
