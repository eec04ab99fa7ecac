import asyncio
import fnmatch
import logging
import re
import time
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from pydantic import ValidationError

from config.constants import DEFAULT_CACHE_TTL_SECONDS, SETTINGS_CACHE_PREFIX
from models.store_settings import StoreSettings

CACHE_COLLECTION = "settings_cache"

logger = logging.getLogger(__name__)


def settings_key(seller_id) -> str:
    return f"{SETTINGS_CACHE_PREFIX}{seller_id}"


# ======================================================
# CACHE CLIENTS
# ======================================================

class CacheClient:
    """Key-value backend with per-key TTL."""

    async def get(self, key: str) -> Optional[dict]:
        raise NotImplementedError

    async def set(self, key: str, value: dict, ttl_seconds: int) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def delete_pattern(self, pattern: str) -> int:
        raise NotImplementedError


class MemoryCacheClient(CacheClient):
    """
    Process-level store. `clock` returns seconds and can be replaced to
    move time forward in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._store: Dict[str, Tuple[float, dict]] = {}

    async def get(self, key):
        entry = self._store.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if self.clock() >= expires_at:
            self._store.pop(key, None)
            return None
        return dict(value)

    async def set(self, key, value, ttl_seconds):
        self._store[key] = (self.clock() + ttl_seconds, dict(value))

    async def delete(self, key):
        self._store.pop(key, None)

    async def delete_pattern(self, pattern):
        keys = [k for k in self._store if fnmatch.fnmatchcase(k, pattern)]
        for key in keys:
            self._store.pop(key, None)
        return len(keys)


class MongoCacheClient(CacheClient):
    """
    Cache entries in their own collection. Mongo's TTL monitor removes
    expired documents eventually, so reads also filter on `expires_at`.
    """

    def __init__(self, db):
        self.collection = db[CACHE_COLLECTION]

    async def get(self, key):
        doc = await self.collection.find_one({
            "key": key,
            "expires_at": {"$gt": datetime.utcnow()},
        })
        return doc["value"] if doc else None

    async def set(self, key, value, ttl_seconds):
        now = datetime.utcnow()
        await self.collection.update_one(
            {"key": key},
            {
                "$set": {
                    "value": value,
                    "expires_at": now + timedelta(seconds=ttl_seconds),
                    "updated_at": now,
                }
            },
            upsert=True,
        )

    async def delete(self, key):
        await self.collection.delete_one({"key": key})

    async def delete_pattern(self, pattern):
        regex = fnmatch.translate(pattern)
        result = await self.collection.delete_many({"key": {"$regex": regex}})
        return result.deleted_count


# ======================================================
# SETTINGS CACHE
# ======================================================

class SettingsCache:
    """
    Read-through cache in front of SettingsStore.

    A performance layer only: every backend error or timeout is logged and
    reported as a miss, and the caller goes to the store.
    """

    def __init__(
        self,
        client: CacheClient,
        *,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        timeout_seconds: Optional[float] = None,
    ):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds

    async def _call(self, op: str, key: str, coro):
        try:
            return await asyncio.wait_for(coro, self.timeout_seconds)
        except Exception:
            logger.warning("SETTINGS_CACHE_%s_FAILED key=%s", op, key, exc_info=True)
            return None

    async def get(self, key: str) -> Optional[StoreSettings]:
        value = await self._call("GET", key, self.client.get(key))
        if value is None:
            return None

        try:
            return StoreSettings.model_validate(value)
        except ValidationError:
            logger.warning("SETTINGS_CACHE_CORRUPT key=%s", key)
            await self.invalidate(key)
            return None

    async def set(self, key: str, value: StoreSettings, ttl_seconds: Optional[int] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        await self._call("SET", key, self.client.set(key, value.model_dump(mode="json"), ttl))

    async def invalidate(self, key: str) -> None:
        await self._call("DELETE", key, self.client.delete(key))

    async def invalidate_by_pattern(self, pattern: str) -> int:
        deleted = await self._call("DELETE_PATTERN", pattern, self.client.delete_pattern(pattern))
        return deleted or 0
