import asyncio

import pytest
from pymongo.errors import DuplicateKeyError

from ideas_repo import ensure_indexes, load_categories, resolve_categories
from ideas_repo.categories import CATEGORIES_COLLECTION


@pytest.mark.asyncio
async def test_empty_input_is_a_noop(fake_db):
    assert await resolve_categories(fake_db, []) == []
    assert CATEGORIES_COLLECTION not in fake_db.collections


@pytest.mark.asyncio
async def test_duplicates_resolve_to_one_row(fake_db):
    await ensure_indexes(fake_db)

    refs = await resolve_categories(fake_db, ["Transport", "Transport", "Food", ""])

    assert [ref.description for ref in refs] == ["Transport", "Food"]
    assert len(fake_db[CATEGORIES_COLLECTION].docs) == 2


@pytest.mark.asyncio
async def test_existing_description_is_reused(fake_db):
    await ensure_indexes(fake_db)
    first = await resolve_categories(fake_db, ["Transport"])

    second = await resolve_categories(fake_db, ["Transport", "Energy"])

    assert second[0].category_id == first[0].category_id
    descriptions = sorted(doc["description"] for doc in fake_db[CATEGORIES_COLLECTION].docs)
    assert descriptions == ["Energy", "Transport"]


@pytest.mark.asyncio
async def test_concurrent_resolution_creates_single_row(fake_db):
    await ensure_indexes(fake_db)

    results = await asyncio.gather(
        resolve_categories(fake_db, ["Transport"]),
        resolve_categories(fake_db, ["Transport"]),
    )

    assert results[0][0].category_id == results[1][0].category_id
    assert len(fake_db[CATEGORIES_COLLECTION].docs) == 1


@pytest.mark.asyncio
async def test_lost_upsert_race_rereads_existing_row(fake_db, monkeypatch):
    await ensure_indexes(fake_db)
    collection = fake_db[CATEGORIES_COLLECTION]

    async def upsert_loses_race(query, update, **kwargs):
        # another writer inserted the same description between our miss and our insert
        collection.docs.append({"_id": "winner", "description": query["description"]})
        raise DuplicateKeyError("E11000 duplicate key error index: description_1")

    monkeypatch.setattr(collection, "find_one_and_update", upsert_loses_race)

    refs = await resolve_categories(fake_db, ["Transport"])

    assert refs[0].category_id == "winner"
    assert len(collection.docs) == 1


@pytest.mark.asyncio
async def test_load_categories_keeps_order_and_skips_unknown(fake_db):
    await ensure_indexes(fake_db)
    refs = await resolve_categories(fake_db, ["a", "b", "c"])
    ids = [ref.category_id for ref in refs]

    loaded = await load_categories(fake_db, [ids[2], "missing", ids[0]])

    assert [ref.description for ref in loaded] == ["c", "a"]
