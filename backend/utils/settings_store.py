import logging
from datetime import datetime
from typing import List, Optional, Tuple

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from models.settings_updates import CodSettingsUpdate, SectionUpdate
from models.store_settings import AdminOverrides, StoreSettings, new_settings_document
from utils.errors import SettingsNotFound, SettingsValidationError
from utils.guards import as_object_id

SETTINGS_COLLECTION = "store_settings"

logger = logging.getLogger(__name__)


def _status_query(status: str) -> dict:
    if status == "open":
        return {"is_store_open": True}
    if status == "closed":
        return {"is_store_open": False}
    if status == "maintenance":
        return {"maintenance_mode.is_enabled": True}
    return {}


OVERRIDDEN_QUERY = {
    "$or": [
        {"admin_overrides.force_store_open": True},
        {"admin_overrides.force_cod_enabled": True},
        {"admin_overrides.override_max_quantity": {"$ne": None}},
    ]
}


class SettingsStore:
    """
    Durable per-seller store settings, one document per seller.

    The unique index on `seller_id` (see utils.indexes) is what guarantees a
    single record when several requests create settings at the same time.
    """

    def __init__(self, db):
        self.collection = db[SETTINGS_COLLECTION]

    # ------------------------------------------
    # READS
    # ------------------------------------------

    async def get(self, seller_id) -> Optional[StoreSettings]:
        doc = await self.collection.find_one({"seller_id": as_object_id(seller_id)})
        return StoreSettings.from_doc(doc) if doc else None

    async def get_or_create(self, seller_id) -> StoreSettings:
        seller_oid = as_object_id(seller_id)

        doc = await self.collection.find_one({"seller_id": seller_oid})
        if doc:
            return StoreSettings.from_doc(doc)

        defaults = new_settings_document(seller_oid, datetime.utcnow())
        defaults.pop("seller_id")

        try:
            doc = await self.collection.find_one_and_update(
                {"seller_id": seller_oid},
                {"$setOnInsert": defaults},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
            logger.info("STORE_SETTINGS_DEFAULTS seller=%s", seller_oid)
        except DuplicateKeyError:
            # Concurrent request created the record first; read theirs.
            doc = await self.collection.find_one({"seller_id": seller_oid})

        if not doc:
            raise SettingsNotFound("Store settings not found", seller_id=str(seller_oid))
        return StoreSettings.from_doc(doc)

    async def list_settings(
        self,
        *,
        status: str = "all",
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[StoreSettings], int]:
        query = _status_query(status)
        skip = (page - 1) * limit

        cursor = (
            self.collection.find(query)
            .sort("updated_at", DESCENDING)
            .skip(skip)
            .limit(limit)
        )
        items = [StoreSettings.from_doc(doc) async for doc in cursor]
        total = await self.collection.count_documents(query)
        return items, total

    async def analytics(self) -> dict:
        count = self.collection.count_documents
        return {
            "total_stores": await count({}),
            "open_stores": await count({"is_store_open": True}),
            "closed_stores": await count({"is_store_open": False}),
            "maintenance_stores": await count({"maintenance_mode.is_enabled": True}),
            "cod_enabled_stores": await count({"cod_settings.is_enabled": True}),
            "returns_enabled_stores": await count({"return_settings.allow_returns": True}),
            "admin_overridden_stores": await count(OVERRIDDEN_QUERY),
        }

    # ------------------------------------------
    # WRITES
    # ------------------------------------------

    async def update(
        self,
        seller_id,
        *sections: SectionUpdate,
        stamp: Optional[dict] = None,
    ) -> StoreSettings:
        """
        Merge one or more validated sections into the seller's record in a
        single `$set`. A seller with no record gets defaults first.
        """
        seller_oid = as_object_id(seller_id)
        current = await self.get_or_create(seller_oid)

        set_doc = {}
        for section in sections:
            changes = section.changes()
            if isinstance(section, CodSettingsUpdate):
                _check_cod_bounds(current, changes)
            for key, value in changes.items():
                path = f"{section.section}.{key}" if section.section else key
                set_doc[path] = value

        if not set_doc and not stamp:
            return current

        set_doc.update(stamp or {})
        set_doc["updated_at"] = datetime.utcnow()

        doc = await self.collection.find_one_and_update(
            {"seller_id": seller_oid},
            {"$set": set_doc},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise SettingsNotFound("Store settings not found", seller_id=str(seller_oid))
        return StoreSettings.from_doc(doc)

    async def clear_overrides(self, seller_id) -> StoreSettings:
        seller_oid = as_object_id(seller_id)

        doc = await self.collection.find_one_and_update(
            {"seller_id": seller_oid},
            {
                "$unset": {
                    f"admin_overrides.{field}": ""
                    for field in AdminOverrides.model_fields
                },
                "$set": {"updated_at": datetime.utcnow()},
            },
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise SettingsNotFound("Seller settings not found", seller_id=str(seller_oid))
        return StoreSettings.from_doc(doc)


def _check_cod_bounds(current: StoreSettings, changes: dict) -> None:
    cod = current.cod_settings
    min_amount = changes.get("min_order_amount_for_cod", cod.min_order_amount_for_cod)
    max_amount = changes.get("max_order_amount_for_cod", cod.max_order_amount_for_cod)

    if min_amount > max_amount:
        raise SettingsValidationError(
            "Minimum order amount cannot be greater than maximum order amount",
            min_order_amount_for_cod=min_amount,
            max_order_amount_for_cod=max_amount,
        )
