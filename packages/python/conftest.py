"""Shared fixtures: an in-memory stand-in for the Motor collection calls the repositories make."""

import copy
from types import SimpleNamespace
from uuid import uuid4

import pytest
import pytest_asyncio
from loguru import logger
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ideas_repo import IdeaRepository, ensure_indexes
from sketch_store import MongoImageStore


def _matches(doc, query):
    for key, expected in (query or {}).items():
        value = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


def _project(doc, projection):
    if not projection:
        return copy.deepcopy(doc)
    keep = {key for key, flag in projection.items() if flag} | {"_id"}
    return {key: copy.deepcopy(value) for key, value in doc.items() if key in keep}


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc

    async def to_list(self, length=None):
        return list(self._docs if length is None else self._docs[:length])


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self.docs = []
        self.unique_keys = {"_id"}
        self.indexes = []

    def _check_unique(self, candidate, ignore=None):
        for key in self.unique_keys:
            if key not in candidate:
                continue
            for doc in self.docs:
                if doc is not ignore and doc.get(key) == candidate[key]:
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error collection: {self.name} index: {key}_1"
                    )

    async def create_index(self, key, unique=False, **kwargs):
        self.indexes.append((key, unique))
        if unique:
            self.unique_keys.add(key)
        return f"{key}_1"

    async def insert_one(self, doc):
        doc.setdefault("_id", uuid4().hex)
        self._check_unique(doc)
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if _matches(doc, query):
                return _project(doc, projection)
        return None

    def find(self, query=None, projection=None):
        return FakeCursor([_project(doc, projection) for doc in self.docs if _matches(doc, query)])

    async def find_one_and_update(
        self, query, update, upsert=False, return_document=ReturnDocument.BEFORE
    ):
        target = next((doc for doc in self.docs if _matches(doc, query)), None)
        changes = update.get("$set", {})
        if target is None:
            if not upsert:
                return None
            created = {key: value for key, value in query.items() if not isinstance(value, dict)}
            created.update(update.get("$setOnInsert", {}))
            created.update(changes)
            self._check_unique(created)
            self.docs.append(copy.deepcopy(created))
            return copy.deepcopy(created) if return_document == ReturnDocument.AFTER else None

        before = copy.deepcopy(target)
        self._check_unique({**target, **changes}, ignore=target)
        target.update(copy.deepcopy(changes))
        return copy.deepcopy(target) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, query):
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


@pytest.fixture()
def fake_db():
    return FakeDatabase()


@pytest.fixture()
def image_store(fake_db):
    return MongoImageStore(fake_db)


@pytest_asyncio.fixture()
async def repo(fake_db, image_store):
    await ensure_indexes(fake_db)
    return IdeaRepository(fake_db, image_store)


@pytest.fixture()
def log_messages():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture()
def stroke():
    return {
        "paths": [{"x": 1.0, "y": 2.0}, {"x": 3.5, "y": 4.0}],
        "strokeWidth": 4,
        "strokeColor": "#ff0000",
        "drawMode": True,
    }
