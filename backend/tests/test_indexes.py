import pytest
from pymongo.errors import OperationFailure

from utils.indexes import ensure_indexes


class IndexCollection:
    def __init__(self, existing=None, conflict=False):
        self.created = []
        self.dropped = []
        self.existing = existing or []
        self.conflict = conflict

    async def create_index(self, keys, **kwargs):
        if self.conflict:
            self.conflict = False
            raise OperationFailure("index options conflict", code=85)
        self.created.append((keys, kwargs))

    def list_indexes(self):
        existing = self.existing

        class Cursor:
            def __aiter__(self):
                self._it = iter(existing)
                return self

            async def __anext__(self):
                try:
                    return next(self._it)
                except StopIteration:
                    raise StopAsyncIteration

        return Cursor()

    async def drop_index(self, name):
        self.dropped.append(name)


class IndexDatabase:
    def __init__(self, **collections):
        self.collections = collections

    def __getitem__(self, name):
        return self.collections.setdefault(name, IndexCollection())

    def __getattr__(self, name):
        if name.startswith("_") or name == "collections":
            raise AttributeError(name)
        return self[name]


def test_ensure_indexes(run):
    db = IndexDatabase()

    run(ensure_indexes(db))

    settings = {kw["name"]: kw for _, kw in db["store_settings"].created}
    assert settings["store_settings_seller_unique_idx"]["unique"] is True
    assert "store_settings_updated_at_idx" in settings

    cache = {kw["name"]: kw for _, kw in db["settings_cache"].created}
    assert cache["settings_cache_key_unique_idx"]["unique"] is True
    assert cache["settings_cache_expires_ttl_idx"]["expireAfterSeconds"] == 0

    assert db["audit_logs"].created


def test_conflicting_index_is_replaced(run):
    settings = IndexCollection(
        existing=[{"name": "seller_id_1", "key": {"seller_id": 1}}],
        conflict=True,
    )
    db = IndexDatabase(store_settings=settings)

    run(ensure_indexes(db))

    assert settings.dropped == ["seller_id_1"]
    assert settings.created[0][1]["name"] == "store_settings_seller_unique_idx"


def test_other_index_errors_propagate(run):
    class Failing(IndexCollection):
        async def create_index(self, keys, **kwargs):
            raise OperationFailure("not authorized", code=13)

    db = IndexDatabase(store_settings=Failing())

    with pytest.raises(OperationFailure):
        run(ensure_indexes(db))
