from fastapi import APIRouter, Depends

from database import get_db
from models.settings_updates import (
    BasicSettingsUpdate,
    BusinessHoursUpdate,
    CancellationRulesUpdate,
    CodSettingsUpdate,
    MaintenanceModeUpdate,
    RefundRulesUpdate,
    ReturnSettingsUpdate,
    SectionUpdate,
)
from models.user import Capability
from utils.audit import changed_fields, log_audit
from utils.dependencies import get_admission_gateway, get_settings_cache, get_settings_store
from utils.security import require_capability
from utils.serializers import serialize_settings
from utils.settings_cache import settings_key

router = APIRouter(
    prefix="/seller/settings",
    tags=["Seller Store Settings"]
)


# ======================================================
# READ
# ======================================================

@router.get("")
async def get_store_settings(
    seller=Depends(require_capability(Capability.MANAGE_OWN_SETTINGS)),
    gateway=Depends(get_admission_gateway),
):
    settings = await gateway.resolve_settings(seller["_id"])

    return {
        "message": "Store settings retrieved successfully",
        "data": serialize_settings(settings),
    }


# ======================================================
# SECTION UPDATES
# ======================================================

async def _save_section(seller, update: SectionUpdate, action: str, *, db, store, cache):
    settings = await store.update(seller["_id"], update)
    await cache.invalidate(settings_key(settings.seller_id))

    await log_audit(
        db,
        actor_id=str(seller["_id"]),
        actor_role="seller",
        action=action,
        metadata={"fields": changed_fields(update)},
    )
    return settings


@router.put("/basic")
async def update_basic_settings(
    data: BasicSettingsUpdate,
    seller=Depends(require_capability(Capability.MANAGE_OWN_SETTINGS)),
    db=Depends(get_db),
    store=Depends(get_settings_store),
    cache=Depends(get_settings_cache),
):
    settings = await _save_section(
        seller, data, "STORE_BASIC_SETTINGS_UPDATED", db=db, store=store, cache=cache
    )
    return {
        "message": "Store basic settings updated successfully",
        "data": serialize_settings(settings),
    }


@router.put("/business-hours")
async def update_business_hours(
    data: BusinessHoursUpdate,
    seller=Depends(require_capability(Capability.MANAGE_OWN_SETTINGS)),
    db=Depends(get_db),
    store=Depends(get_settings_store),
    cache=Depends(get_settings_cache),
):
    settings = await _save_section(
        seller, data, "STORE_BUSINESS_HOURS_UPDATED", db=db, store=store, cache=cache
    )
    return {
        "message": "Business hours updated successfully",
        "data": serialize_settings(settings),
    }


@router.put("/maintenance")
async def update_maintenance_mode(
    data: MaintenanceModeUpdate,
    seller=Depends(require_capability(Capability.MANAGE_OWN_SETTINGS)),
    db=Depends(get_db),
    store=Depends(get_settings_store),
    cache=Depends(get_settings_cache),
):
    settings = await _save_section(
        seller, data, "STORE_MAINTENANCE_UPDATED", db=db, store=store, cache=cache
    )
    return {
        "message": "Maintenance mode settings updated successfully",
        "data": serialize_settings(settings),
    }


@router.put("/returns")
async def update_return_settings(
    data: ReturnSettingsUpdate,
    seller=Depends(require_capability(Capability.MANAGE_OWN_SETTINGS)),
    db=Depends(get_db),
    store=Depends(get_settings_store),
    cache=Depends(get_settings_cache),
):
    settings = await _save_section(
        seller, data, "STORE_RETURN_SETTINGS_UPDATED", db=db, store=store, cache=cache
    )
    return {
        "message": "Return settings updated successfully",
        "data": serialize_settings(settings),
    }


@router.put("/refunds")
async def update_refund_rules(
    data: RefundRulesUpdate,
    seller=Depends(require_capability(Capability.MANAGE_OWN_SETTINGS)),
    db=Depends(get_db),
    store=Depends(get_settings_store),
    cache=Depends(get_settings_cache),
):
    settings = await _save_section(
        seller, data, "STORE_REFUND_RULES_UPDATED", db=db, store=store, cache=cache
    )
    return {
        "message": "Refund rules updated successfully",
        "data": serialize_settings(settings),
    }


@router.put("/cancellation")
async def update_cancellation_rules(
    data: CancellationRulesUpdate,
    seller=Depends(require_capability(Capability.MANAGE_OWN_SETTINGS)),
    db=Depends(get_db),
    store=Depends(get_settings_store),
    cache=Depends(get_settings_cache),
):
    settings = await _save_section(
        seller, data, "STORE_CANCELLATION_RULES_UPDATED", db=db, store=store, cache=cache
    )
    return {
        "message": "Cancellation rules updated successfully",
        "data": serialize_settings(settings),
    }


@router.put("/cod")
async def update_cod_settings(
    data: CodSettingsUpdate,
    seller=Depends(require_capability(Capability.MANAGE_OWN_SETTINGS)),
    db=Depends(get_db),
    store=Depends(get_settings_store),
    cache=Depends(get_settings_cache),
):
    settings = await _save_section(
        seller, data, "STORE_COD_SETTINGS_UPDATED", db=db, store=store, cache=cache
    )
    return {
        "message": "COD settings updated successfully",
        "data": serialize_settings(settings),
    }
