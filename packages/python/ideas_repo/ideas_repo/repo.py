"""Async persistence layer for ideas, their categories and their sketches.

An idea row and its sketch images live in separate collections and are
written in separate steps. No transaction spans them: a failure after the
idea write leaves the idea without its image, and a failed image deletion
leaves an orphaned image behind the deleted idea.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)
from uuid import uuid4

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from db_core import StoreError, dependency_errors, get_db
from db_core.typing import MongoDocument
from sketch_store import (
    IMAGES_COLLECTION,
    ImagePreview,
    ImageStore,
    MongoImageStore,
    SketchImage,
    SketchUpdate,
)

from .categories import CATEGORIES_COLLECTION, load_categories, resolve_categories
from .errors import IdeaNotFoundError
from .fanout import gather_best_effort
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
    parse_payload,
)

IDEAS_COLLECTION = "ideas"

IdeaT = TypeVar("IdeaT", bound=Idea)
ImageT = TypeVar("ImageT", ImagePreview, SketchImage)


async def ensure_indexes(db: Optional[AsyncIOMotorDatabase] = None) -> None:
    """Create the indexes the repository relies on. Safe to call repeatedly."""

    db = db if db is not None else get_db()
    with dependency_errors("create indexes"):
        await db[CATEGORIES_COLLECTION].create_index("description", unique=True)
        await db[IMAGES_COLLECTION].create_index("idea_id")
        await db[IDEAS_COLLECTION].create_index("user_id")


def _tag_values(tags: Iterable[Tag]) -> List[str]:
    return list(dict.fromkeys(tag.value for tag in tags))


def _with_image_ids(loaded: Sequence[Tuple[str, ImageT]]) -> List[ImageT]:
    return [image.model_copy(update={"image_id": image_id}) for image_id, image in loaded]


def _doc_to_model(
    doc: MongoDocument,
    categories: List[CategoryRef],
    model: Type[IdeaT] = Idea,
    **extra: Any,
) -> IdeaT:
    return model(
        idea_id=str(doc["_id"]),
        user_id=doc["user_id"],
        name=doc["name"],
        content=doc.get("content") or "",
        categories=categories,
        tags=doc.get("tags") or [],
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
        **extra,
    )


class IdeaRepository:
    """
    Idea lifecycle operations.

    The repository keeps no state besides its database handle and image
    store, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        db: Optional[AsyncIOMotorDatabase] = None,
        image_store: Optional[ImageStore] = None,
    ):
        self.db = db if db is not None else get_db()
        self.image_store = image_store if image_store is not None else MongoImageStore(self.db)

    @property
    def ideas(self):
        return self.db[IDEAS_COLLECTION]

    # ---------------------------------------------------------
    # CREATE
    # ---------------------------------------------------------
    async def create_idea(self, data: Union[IdeaCreate, Mapping[str, Any]]) -> IdeaWithImage:
        """
        Store a new idea and, when paths, raster and format are all given,
        one sketch image for it.

        A partially supplied sketch is ignored and the idea is stored without
        an image. If storing the image fails the idea is kept and the error
        propagates.
        """

        payload = parse_payload(IdeaCreate, data)
        categories = await resolve_categories(self.db, payload.categories)

        now = datetime.utcnow()
        doc = {
            "_id": uuid4().hex,
            "user_id": payload.user_id,
            "name": payload.name,
            "content": payload.content,
            "category_ids": [ref.category_id for ref in categories],
            "tags": _tag_values(payload.tags),
            "created_at": now,
            "updated_at": now,
        }
        with dependency_errors("create idea"):
            await self.ideas.insert_one(doc)
        idea_id = doc["_id"]
        logger.info("Created idea {idea_id} for user {user_id}", idea_id=idea_id, user_id=payload.user_id)

        image = None
        if payload.has_sketch():
            try:
                image = await self.image_store.create_sketch(
                    payload.paths, payload.sketch_base64, payload.sketch_format, idea_id
                )
            except StoreError:
                logger.error("Idea {idea_id} was stored without its sketch", idea_id=idea_id)
                raise
        elif payload.paths is not None or payload.sketch_base64 or payload.sketch_format:
            logger.debug("Incomplete sketch for idea {idea_id} ignored", idea_id=idea_id)

        return _doc_to_model(doc, categories, IdeaWithImage, image=image)

    # ---------------------------------------------------------
    # UPDATE
    # ---------------------------------------------------------
    async def update_idea(
        self, idea_id: str, updates: Union[IdeaUpdate, Mapping[str, Any]]
    ) -> Idea:
        """
        Apply a sparse update and return the updated idea.

        ``categories``/``tags`` replace the stored values when given, an empty
        list clears them. The sketch is replaced only when ``image_id``,
        ``paths``, ``sketch_base64`` and ``sketch_format`` are all present, and
        only if that image belongs to this idea; otherwise
        ``ImageNotFoundError`` is raised after the idea row was updated. The
        updated image is not part of the result.
        """

        payload = parse_payload(IdeaUpdate, updates)

        changes: Dict[str, Any] = {}
        if payload.name is not None:
            changes["name"] = payload.name
        if payload.content is not None:
            changes["content"] = payload.content
        if payload.categories is not None:
            refs = await resolve_categories(self.db, payload.categories)
            changes["category_ids"] = [ref.category_id for ref in refs]
        if payload.tags is not None:
            changes["tags"] = _tag_values(payload.tags)
        changes["updated_at"] = datetime.utcnow()

        with dependency_errors(f"update idea {idea_id}"):
            doc = await self.ideas.find_one_and_update(
                {"_id": idea_id},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            raise IdeaNotFoundError(f"Idea {idea_id} not found")
        logger.info(
            "Updated idea {idea_id} fields={fields}",
            idea_id=idea_id,
            fields=sorted(key for key in changes if key != "updated_at"),
        )

        if payload.has_sketch():
            await self.image_store.update_sketch(
                payload.image_id,
                SketchUpdate(
                    paths=payload.paths,
                    base64=payload.sketch_base64,
                    format=payload.sketch_format,
                ),
                idea_id=idea_id,
            )

        categories = await load_categories(self.db, doc.get("category_ids") or [])
        return _doc_to_model(doc, categories)

    # ---------------------------------------------------------
    # READ
    # ---------------------------------------------------------
    async def get_idea_with_sketch(self, idea_id: str) -> IdeaWithSketches:
        """Return one idea with the full path data of every sketch that could be loaded."""

        with dependency_errors(f"load idea {idea_id}"):
            doc = await self.ideas.find_one({"_id": idea_id})
        if not doc:
            raise IdeaNotFoundError(f"Idea {idea_id} not found")

        categories, image_ids = await asyncio.gather(
            load_categories(self.db, doc.get("category_ids") or []),
            self.image_store.list_image_ids(idea_id),
        )
        sketches = await gather_best_effort(
            image_ids, self.image_store.get_image_with_paths, action="load sketch"
        )
        images = _with_image_ids(sketches.succeeded)
        return _doc_to_model(doc, categories, IdeaWithSketches, images=images)

    async def get_all_ideas_with_images(self) -> List[IdeaWithPreviews]:
        """
        List every idea with raster previews of its images.

        Images that fail to load are left out. The order is whatever the
        store returns.
        """

        with dependency_errors("list ideas"):
            docs = [doc async for doc in self.ideas.find({})]
        if not docs:
            return []

        category_ids = list(
            dict.fromkeys(cid for doc in docs for cid in doc.get("category_ids") or [])
        )
        categories = {
            ref.category_id: ref for ref in await load_categories(self.db, category_ids)
        }

        idea_ids = [str(doc["_id"]) for doc in docs]
        image_ids = await self.image_store.list_image_ids_by_idea(idea_ids)

        results: List[IdeaWithPreviews] = []
        for doc, idea_id in zip(docs, idea_ids):
            previews = await gather_best_effort(
                image_ids.get(idea_id, []),
                self.image_store.get_image_only,
                action="load image preview",
            )
            linked = [categories[cid] for cid in doc.get("category_ids") or [] if cid in categories]
            images = _with_image_ids(previews.succeeded)
            results.append(_doc_to_model(doc, linked, IdeaWithPreviews, images=images))
        return results

    # ---------------------------------------------------------
    # DELETE
    # ---------------------------------------------------------
    async def delete_idea(self, idea_id: str) -> DeleteResult:
        """
        Delete the idea's sketches, then the idea itself.

        Sketch deletions are best-effort: failures are logged and the idea row
        is deleted anyway.
        """

        image_ids = await self.image_store.list_image_ids(idea_id)
        outcome = await gather_best_effort(
            image_ids, self.image_store.delete_sketch, action="delete sketch"
        )
        if outcome.failed:
            logger.warning(
                "{count} sketch(es) of idea {idea_id} could not be deleted",
                count=len(outcome.failed),
                idea_id=idea_id,
            )

        with dependency_errors(f"delete idea {idea_id}"):
            result = await self.ideas.delete_one({"_id": idea_id})
        if result.deleted_count == 0:
            raise IdeaNotFoundError(f"Idea {idea_id} not found")

        logger.info("Deleted idea {idea_id}", idea_id=idea_id)
        return DeleteResult(idea_id=idea_id)
