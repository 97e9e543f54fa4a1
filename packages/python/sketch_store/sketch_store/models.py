"""Pydantic models describing sketch images and their projections."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Point(BaseModel):
    """Single point of a stroke on the drawing canvas."""

    x: float
    y: float


class SketchStroke(BaseModel):
    """
    One drawable stroke as emitted by the sketch canvas.

    Unknown keys are kept so strokes round-trip without losing canvas data.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    paths: List[Point] = Field(default_factory=list)
    stroke_width: float = Field(default=4, alias="strokeWidth")
    stroke_color: str = Field(default="#000000", alias="strokeColor")
    draw_mode: bool = Field(default=True, alias="drawMode")


class Image(BaseModel):
    """A stored sketch image linked to an idea."""

    model_config = ConfigDict(populate_by_name=True)

    image_id: str = Field(alias="imageID")
    idea_id: str = Field(alias="ideaID")
    paths: List[SketchStroke] = Field(default_factory=list)
    base64: str
    format: str


class ImagePreview(BaseModel):
    """Cheap projection used when listing ideas: raster only."""

    model_config = ConfigDict(populate_by_name=True)

    image_id: Optional[str] = Field(default=None, alias="imageID")
    base64: str
    format: str


class SketchImage(BaseModel):
    """Full projection with vector path data."""

    model_config = ConfigDict(populate_by_name=True)

    image_id: Optional[str] = Field(default=None, alias="imageID")
    paths: List[SketchStroke] = Field(default_factory=list)
    base64: str
    format: str


class SketchUpdate(BaseModel):
    """Replacement values for an existing sketch image."""

    paths: Optional[List[SketchStroke]] = None
    base64: Optional[str] = None
    format: Optional[str] = None
