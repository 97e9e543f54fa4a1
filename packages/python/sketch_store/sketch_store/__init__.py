"""Sketch image store: vector strokes plus a base64 raster preview per image."""

from .errors import ImageNotFoundError
from .models import Image, ImagePreview, Point, SketchImage, SketchStroke, SketchUpdate
from .store import IMAGES_COLLECTION, ImageStore, MongoImageStore

__all__ = [
    "IMAGES_COLLECTION",
    "Image",
    "ImageNotFoundError",
    "ImagePreview",
    "ImageStore",
    "MongoImageStore",
    "Point",
    "SketchImage",
    "SketchStroke",
    "SketchUpdate",
]
