"""Find-or-create resolution of free-text category descriptions."""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Sequence
from uuid import uuid4

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from db_core import dependency_errors
from db_core.typing import MongoDocument

from .models import CategoryRef

CATEGORIES_COLLECTION = "categories"


def _dedupe(values: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        if not value or not value.strip():
            continue
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def _doc_to_ref(doc: MongoDocument) -> CategoryRef:
    return CategoryRef(category_id=str(doc["_id"]), description=doc["description"])


async def _find_or_create(db: AsyncIOMotorDatabase, description: str) -> CategoryRef:
    """
    Upsert keyed on the unique ``description`` index.

    Two concurrent upserts for a new description can both miss and one of them
    then fails on the unique index; that loser re-reads the winner's row.
    """

    collection = db[CATEGORIES_COLLECTION]
    try:
        with dependency_errors(f"resolve category {description!r}"):
            doc = await collection.find_one_and_update(
                {"description": description},
                {"$setOnInsert": {"_id": uuid4().hex, "description": description}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
    except DuplicateKeyError:
        logger.debug("Category {description!r} created concurrently, re-reading", description=description)
        with dependency_errors(f"re-read category {description!r}"):
            doc = await collection.find_one({"description": description})
        if not doc:
            raise
    return _doc_to_ref(doc)


async def resolve_categories(
    db: AsyncIOMotorDatabase, descriptions: Iterable[str]
) -> List[CategoryRef]:
    """
    Ensure a category exists for every description and return their refs.

    Duplicates and blank strings in ``descriptions`` are dropped; the result
    follows the order of first occurrence. An empty input makes no store call.
    """

    unique = _dedupe(descriptions)
    if not unique:
        return []
    return list(await asyncio.gather(*(_find_or_create(db, desc) for desc in unique)))


async def load_categories(db: AsyncIOMotorDatabase, category_ids: Sequence[str]) -> List[CategoryRef]:
    """Load category refs for ``category_ids``, keeping their order and skipping unknown ids."""

    if not category_ids:
        return []
    with dependency_errors("load categories"):
        cursor = db[CATEGORIES_COLLECTION].find({"_id": {"$in": list(category_ids)}})
        docs = [doc async for doc in cursor]
    by_id = {str(doc["_id"]): doc for doc in docs}
    return [_doc_to_ref(by_id[cid]) for cid in category_ids if cid in by_id]
