import logging
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

from models.settings_updates import AdminOverridesUpdate
from models.store_settings import StoreSettings
from utils.errors import SettingsValidationError
from utils.settings_cache import SettingsCache, settings_key
from utils.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class OverrideManager:
    """
    Administrator overrides. Each mutation is persisted first and the
    seller's cache entry invalidated last; readers may see the previous
    value until then or until the entry's TTL runs out.
    """

    def __init__(self, store: SettingsStore, cache: SettingsCache):
        self.store = store
        self.cache = cache

    async def apply(
        self,
        seller_id,
        *,
        reason: str,
        admin_id: str,
        force_store_open: Optional[bool] = None,
        force_cod_enabled: Optional[bool] = None,
        override_max_quantity: Optional[int] = None,
    ) -> StoreSettings:
        reason = (reason or "").strip()
        if not reason:
            raise SettingsValidationError("Override reason is required", field="reason")

        try:
            update = AdminOverridesUpdate(
                force_store_open=bool(force_store_open),
                force_cod_enabled=bool(force_cod_enabled),
                override_max_quantity=override_max_quantity,
                override_reason=reason,
                overridden_by=str(admin_id),
                overridden_at=datetime.utcnow(),
            )
        except ValidationError as exc:
            raise SettingsValidationError("Invalid override", errors=exc.errors(include_url=False)) from exc

        settings = await self.store.update(seller_id, update)
        await self.cache.invalidate(settings_key(settings.seller_id))

        logger.info(
            "ADMIN_OVERRIDE_APPLIED seller=%s admin=%s store_open=%s cod=%s max_qty=%s",
            settings.seller_id,
            admin_id,
            update.force_store_open,
            update.force_cod_enabled,
            update.override_max_quantity,
        )
        return settings

    async def remove(self, seller_id) -> StoreSettings:
        settings = await self.store.clear_overrides(seller_id)
        await self.cache.invalidate(settings_key(settings.seller_id))

        logger.info("ADMIN_OVERRIDE_REMOVED seller=%s", settings.seller_id)
        return settings
