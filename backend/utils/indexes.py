from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure

from utils.settings_cache import CACHE_COLLECTION
from utils.settings_store import SETTINGS_COLLECTION


def _normalize_key_pairs(keys):
    return [(k, v) for k, v in keys]


async def _create_index_safe(collection, keys, **kwargs):
    """
    Create index safely.
    If Mongo reports IndexOptionsConflict/IndexKeySpecsConflict for same key pattern,
    drop the conflicting index and recreate with desired options.
    """
    desired_key = _normalize_key_pairs(keys)
    desired_name = kwargs.get("name")
    try:
        await collection.create_index(keys, **kwargs)
        return
    except OperationFailure as e:
        if getattr(e, "code", None) not in {85, 86}:
            raise

        conflicting_names = []
        async for idx in collection.list_indexes():
            idx_key = _normalize_key_pairs(list(idx.get("key", {}).items()))
            if idx_key == desired_key:
                idx_name = idx.get("name")
                if idx_name and idx_name != desired_name:
                    conflicting_names.append(idx_name)

        for idx_name in conflicting_names:
            await collection.drop_index(idx_name)

        await collection.create_index(keys, **kwargs)


async def ensure_indexes(db):
    # Store settings: one record per seller
    await _create_index_safe(
        db[SETTINGS_COLLECTION],
        [("seller_id", ASCENDING)],
        name="store_settings_seller_unique_idx",
        unique=True,
    )
    await _create_index_safe(
        db[SETTINGS_COLLECTION],
        [("updated_at", DESCENDING)],
        name="store_settings_updated_at_idx",
    )

    # Settings cache
    await _create_index_safe(
        db[CACHE_COLLECTION],
        [("key", ASCENDING)],
        name="settings_cache_key_unique_idx",
        unique=True,
    )
    await _create_index_safe(
        db[CACHE_COLLECTION],
        [("expires_at", ASCENDING)],
        name="settings_cache_expires_ttl_idx",
        expireAfterSeconds=0,
    )

    # Audit
    await _create_index_safe(
        db.audit_logs,
        [("created_at", DESCENDING)],
        name="audit_logs_created_at_idx",
    )
