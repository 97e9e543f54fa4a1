"""Pydantic models describing ideas, their categories and input payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from sketch_store import Image, ImagePreview, SketchImage, SketchStroke

from .errors import ValidationError

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class Tag(str, Enum):
    """Closed vocabulary of tags an idea can carry."""

    FUNNY = "FUNNY"
    SERIOUS = "SERIOUS"
    USEFUL = "USEFUL"
    CREATIVE = "CREATIVE"
    TECH = "TECH"
    BUSINESS = "BUSINESS"
    ART = "ART"
    OTHER = "OTHER"


class CategoryRef(BaseModel):
    """Category linked to an idea."""

    model_config = ConfigDict(populate_by_name=True)

    category_id: str = Field(alias="categoryID")
    description: str


class Idea(BaseModel):
    """Representation of an idea entry stored in MongoDB."""

    model_config = ConfigDict(populate_by_name=True)

    idea_id: str = Field(alias="ideaID")
    user_id: str = Field(alias="userID")
    name: str
    content: str = ""
    categories: List[CategoryRef] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class IdeaWithImage(Idea):
    """Result of creating an idea: the image is ``None`` when no sketch was stored."""

    image: Optional[Image] = None


class IdeaWithSketches(Idea):
    """Single idea with full sketch path data."""

    images: List[SketchImage] = Field(default_factory=list)


class IdeaWithPreviews(Idea):
    """Idea as listed, with raster-only image previews."""

    images: List[ImagePreview] = Field(default_factory=list)


class DeleteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    idea_id: str = Field(alias="ideaID")
    message: str = "Idea deleted successfully"


def _require_text(value: Optional[str], field: str) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError(f"{field} must not be empty")
    return value


class IdeaCreate(BaseModel):
    """Payload for creating a new idea, optionally with a sketch."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userID")
    name: str
    content: str = ""
    categories: List[str] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)
    paths: Optional[List[SketchStroke]] = None
    sketch_base64: Optional[str] = Field(default=None, alias="sketchBase64")
    sketch_format: Optional[str] = Field(default=None, alias="sketchFormat")

    @field_validator("user_id", "name")
    @classmethod
    def _not_blank(cls, value: str, info) -> str:
        return _require_text(value, info.field_name)

    def has_sketch(self) -> bool:
        """True only when paths, raster and format were all supplied."""
        return (
            self.paths is not None
            and bool(self.sketch_base64)
            and bool(self.sketch_format)
        )


class IdeaUpdate(BaseModel):
    """
    Sparse update for an idea.

    Fields left out of the payload are not touched. ``categories`` and
    ``tags`` given as an empty list clear the stored values, so callers must
    omit them (not send ``[]``) to keep the current links.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    content: Optional[str] = None
    categories: Optional[List[str]] = None
    tags: Optional[List[Tag]] = None
    image_id: Optional[str] = Field(default=None, alias="imageID")
    paths: Optional[List[SketchStroke]] = None
    sketch_base64: Optional[str] = Field(default=None, alias="sketchBase64")
    sketch_format: Optional[str] = Field(default=None, alias="sketchFormat")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value, "name")

    def has_sketch(self) -> bool:
        """True only when the image id and all three sketch fields were supplied."""
        return (
            bool(self.image_id)
            and self.paths is not None
            and bool(self.sketch_base64)
            and bool(self.sketch_format)
        )


def parse_payload(model: Type[PayloadT], data: PayloadT | Mapping[str, Any]) -> PayloadT:
    """Validate ``data`` into ``model``, raising the domain ``ValidationError``."""

    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(str(exc)) from exc
