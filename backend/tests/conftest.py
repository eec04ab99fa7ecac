"""
Pytest fixtures for the store settings / admission tests.

The Mongo fake implements only what SettingsStore, MongoCacheClient and the
audit log call. It yields to the event loop between the read and the write
of an upsert so concurrent creators really do race, and enforces the unique
indexes the real deployment declares.
"""

import asyncio
import copy
import re
from datetime import datetime
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from models.store_settings import StoreSettings, TimeSlot
from utils.settings_cache import MemoryCacheClient, SettingsCache

UNIQUE_KEYS = {
    "store_settings": "seller_id",
    "settings_cache": "key",
}


# ======================================================
# FAKE MONGO
# ======================================================

_MISSING = object()


def _get_path(doc, path):
    value = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _set_path(doc, path, value):
    parts = path.split(".")
    for part in parts[:-1]:
        doc = doc.setdefault(part, {})
    doc[parts[-1]] = value


def _unset_path(doc, path):
    parts = path.split(".")
    for part in parts[:-1]:
        doc = doc.get(part)
        if not isinstance(doc, dict):
            return
    doc.pop(parts[-1], None)


def _matches_condition(value, condition):
    if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
        for op, expected in condition.items():
            present = value is not _MISSING
            if op == "$gt" and not (present and value is not None and value > expected):
                return False
            if op == "$gte" and not (present and value is not None and value >= expected):
                return False
            if op == "$ne" and present and value == expected:
                return False
            if op == "$ne" and not present and expected is None:
                return False
            if op == "$regex" and not (present and re.search(expected, value)):
                return False
        return True
    return value is not _MISSING and value == condition


def matches(doc, query):
    for key, condition in query.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
            continue
        if not _matches_condition(_get_path(doc, key), condition):
            return False
    return True


def _sort_value(value):
    return value if isinstance(value, datetime) else datetime.min


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, key, direction):
        self._docs.sort(
            key=lambda d: _sort_value(_get_path(d, key)),
            reverse=direction < 0,
        )
        return self

    def skip(self, n):
        self._skip = n
        return self

    def limit(self, n):
        self._limit = n
        return self

    def __aiter__(self):
        docs = self._docs[self._skip:]
        if self._limit:
            docs = docs[:self._limit]
        self._iter = iter(docs)
        return self

    async def __anext__(self):
        try:
            return copy.deepcopy(next(self._iter))
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self.docs = []
        self.unique_key = UNIQUE_KEYS.get(name)

    def _check_unique(self, doc):
        if not self.unique_key:
            return
        value = _get_path(doc, self.unique_key)
        for other in self.docs:
            if _get_path(other, self.unique_key) == value:
                raise DuplicateKeyError(f"E11000 duplicate key {self.unique_key}")

    def _find(self, query):
        return next((d for d in self.docs if matches(d, query)), None)

    async def insert_one(self, doc):
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query):
        await asyncio.sleep(0)
        doc = self._find(query)
        return copy.deepcopy(doc) if doc else None

    def find(self, query=None):
        return FakeCursor([d for d in self.docs if matches(d, query or {})])

    async def count_documents(self, query):
        return sum(1 for d in self.docs if matches(d, query))

    def _apply(self, doc, update, inserting):
        for path, value in update.get("$set", {}).items():
            _set_path(doc, path, copy.deepcopy(value))
        if inserting:
            for path, value in update.get("$setOnInsert", {}).items():
                _set_path(doc, path, copy.deepcopy(value))
        for path in update.get("$unset", {}):
            _unset_path(doc, path)

    async def _upsert(self, query, update, upsert):
        doc = self._find(query)
        if doc is not None:
            self._apply(doc, update, inserting=False)
            return doc

        if not upsert:
            return None

        await asyncio.sleep(0)
        new_doc = {"_id": ObjectId()}
        for key, value in query.items():
            if not key.startswith("$") and not isinstance(value, dict):
                _set_path(new_doc, key, value)
        self._apply(new_doc, update, inserting=True)
        self._check_unique(new_doc)
        self.docs.append(new_doc)
        return new_doc

    async def find_one_and_update(self, query, update, upsert=False, return_document=ReturnDocument.BEFORE):
        await asyncio.sleep(0)
        before = copy.deepcopy(self._find(query))
        doc = await self._upsert(query, update, upsert)
        if return_document == ReturnDocument.AFTER:
            return copy.deepcopy(doc) if doc else None
        return before

    async def update_one(self, query, update, upsert=False):
        doc = await self._upsert(query, update, upsert)
        return SimpleNamespace(matched_count=1 if doc else 0)

    async def delete_one(self, query):
        doc = self._find(query)
        if doc is not None:
            self.docs.remove(doc)
        return SimpleNamespace(deleted_count=1 if doc else 0)

    async def delete_many(self, query):
        doomed = [d for d in self.docs if matches(d, query)]
        for doc in doomed:
            self.docs.remove(doc)
        return SimpleNamespace(deleted_count=len(doomed))


class FakeDatabase:
    def __init__(self):
        self._collections = {}

    def __getitem__(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]


class DownCollection:
    """Every call fails as if the Mongo server were unreachable."""

    def __getattr__(self, name):
        async def fail(*args, **kwargs):
            raise ServerSelectionTimeoutError("mongo unreachable")
        return fail


class DownDatabase:
    def __getitem__(self, name):
        return DownCollection()

    def __getattr__(self, name):
        return DownCollection()


class BrokenCacheClient:
    def __init__(self):
        self.calls = 0

    async def _fail(self, *args, **kwargs):
        self.calls += 1
        raise ConnectionError("cache unreachable")

    get = set = delete = delete_pattern = _fail


class Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


# ======================================================
# FIXTURES
# ======================================================

@pytest.fixture
def run():
    return asyncio.run


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def down_db():
    return DownDatabase()


@pytest.fixture
def broken_cache_client():
    return BrokenCacheClient()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def cache(clock):
    return SettingsCache(MemoryCacheClient(clock=clock), ttl_seconds=300)


@pytest.fixture
def seller_id():
    return ObjectId()


@pytest.fixture
def make_settings(seller_id):
    """
    StoreSettings with defaults, every field overridable by keyword.
    `monday_slots` replaces Monday's order slots with (start, end, active).
    """

    def factory(monday_slots=None, **overrides):
        settings = StoreSettings(seller_id=str(seller_id), **overrides)
        if monday_slots is not None:
            monday = settings.schedule_for("monday")
            monday.order_time_slots = [
                TimeSlot(start_time=start, end_time=end, is_active=active)
                for start, end, active in monday_slots
            ]
        return settings

    return factory

