"""Async persistence for sketch images keyed by an opaque image id."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union
from uuid import uuid4

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from db_core import dependency_errors, get_db
from db_core.typing import MongoDocument

from .errors import ImageNotFoundError
from .models import Image, ImagePreview, SketchImage, SketchStroke, SketchUpdate

IMAGES_COLLECTION = "images"

StrokeInput = Union[SketchStroke, dict]


class ImageStore(Protocol):
    """Contract the ideas repository relies on for sketch persistence."""

    async def create_sketch(
        self,
        paths: Iterable[StrokeInput],
        base64: str,
        format: str,
        idea_id: str,
    ) -> Image: ...

    async def update_sketch(
        self, image_id: str, update: SketchUpdate, *, idea_id: Optional[str] = None
    ) -> Image: ...

    async def get_image_only(self, image_id: str) -> ImagePreview: ...

    async def get_image_with_paths(self, image_id: str) -> SketchImage: ...

    async def delete_sketch(self, image_id: str) -> None: ...

    async def list_image_ids(self, idea_id: str) -> List[str]: ...

    async def list_image_ids_by_idea(self, idea_ids: Sequence[str]) -> Dict[str, List[str]]: ...


def _dump_paths(paths: Iterable[StrokeInput]) -> list[dict[str, Any]]:
    return [SketchStroke.model_validate(path).model_dump(by_alias=True) for path in paths]


def _doc_to_image(doc: MongoDocument) -> Image:
    return Image(
        image_id=str(doc["_id"]),
        idea_id=doc["idea_id"],
        paths=doc.get("paths") or [],
        base64=doc["base64"],
        format=doc["format"],
    )


class MongoImageStore:
    """``ImageStore`` backed by the ``images`` collection."""

    def __init__(self, db: Optional[AsyncIOMotorDatabase] = None):
        self.db = db if db is not None else get_db()

    @property
    def collection(self):
        return self.db[IMAGES_COLLECTION]

    async def create_sketch(
        self,
        paths: Iterable[StrokeInput],
        base64: str,
        format: str,
        idea_id: str,
    ) -> Image:
        now = datetime.utcnow()
        doc = {
            "_id": uuid4().hex,
            "idea_id": idea_id,
            "paths": _dump_paths(paths),
            "base64": base64,
            "format": format,
            "created_at": now,
            "updated_at": now,
        }
        with dependency_errors(f"create sketch for idea {idea_id}"):
            await self.collection.insert_one(doc)
        logger.debug(
            "Created sketch {image_id} for idea {idea_id}", image_id=doc["_id"], idea_id=idea_id
        )
        return _doc_to_image(doc)

    async def update_sketch(
        self, image_id: str, update: SketchUpdate, *, idea_id: Optional[str] = None
    ) -> Image:
        """
        Replace the given fields of a sketch.

        With ``idea_id`` the sketch must belong to that idea; a sketch owned by
        another idea is reported as not found.
        """

        changes: dict[str, Any] = {"updated_at": datetime.utcnow()}
        if update.paths is not None:
            changes["paths"] = _dump_paths(update.paths)
        if update.base64 is not None:
            changes["base64"] = update.base64
        if update.format is not None:
            changes["format"] = update.format

        query: Dict[str, Any] = {"_id": image_id}
        if idea_id is not None:
            query["idea_id"] = idea_id

        with dependency_errors(f"update sketch {image_id}"):
            doc = await self.collection.find_one_and_update(
                query,
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            owner = f" for idea {idea_id}" if idea_id is not None else ""
            raise ImageNotFoundError(f"Image {image_id} not found{owner}")
        return _doc_to_image(doc)

    async def get_image_only(self, image_id: str) -> ImagePreview:
        with dependency_errors(f"load image {image_id}"):
            doc = await self.collection.find_one({"_id": image_id}, {"base64": 1, "format": 1})
        if not doc:
            raise ImageNotFoundError(f"Image {image_id} not found")
        return ImagePreview(image_id=image_id, base64=doc["base64"], format=doc["format"])

    async def get_image_with_paths(self, image_id: str) -> SketchImage:
        with dependency_errors(f"load sketch {image_id}"):
            doc = await self.collection.find_one(
                {"_id": image_id}, {"paths": 1, "base64": 1, "format": 1}
            )
        if not doc:
            raise ImageNotFoundError(f"Image {image_id} not found")
        return SketchImage(
            image_id=image_id,
            paths=doc.get("paths") or [],
            base64=doc["base64"],
            format=doc["format"],
        )

    async def delete_sketch(self, image_id: str) -> None:
        with dependency_errors(f"delete sketch {image_id}"):
            result = await self.collection.delete_one({"_id": image_id})
        if result.deleted_count == 0:
            raise ImageNotFoundError(f"Image {image_id} not found")

    async def list_image_ids(self, idea_id: str) -> List[str]:
        """Ids of every sketch owned by ``idea_id``."""

        with dependency_errors(f"list images of idea {idea_id}"):
            cursor = self.collection.find({"idea_id": idea_id}, {"_id": 1})
            return [str(doc["_id"]) async for doc in cursor]

    async def list_image_ids_by_idea(self, idea_ids: Sequence[str]) -> Dict[str, List[str]]:
        """Sketch ids grouped by owning idea; every requested idea gets an entry."""

        grouped: Dict[str, List[str]] = {idea_id: [] for idea_id in idea_ids}
        if not grouped:
            return grouped
        with dependency_errors("list images"):
            cursor = self.collection.find(
                {"idea_id": {"$in": list(grouped)}}, {"_id": 1, "idea_id": 1}
            )
            async for doc in cursor:
                grouped.setdefault(doc["idea_id"], []).append(str(doc["_id"]))
        return grouped
