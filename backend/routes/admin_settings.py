from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from config.constants import MAX_OVERRIDE_REASON, MAX_PAGE_SIZE
from database import get_db
from models.settings_updates import AdminForceUpdate
from models.user import Capability
from utils.audit import log_audit
from utils.dependencies import get_override_manager, get_settings_cache, get_settings_store
from utils.guards import parse_object_id
from utils.security import require_capability
from utils.serializers import serialize_settings, serialize_settings_list
from utils.settings_cache import settings_key


router = APIRouter(prefix="/admin", tags=["Admin Store Settings"])


# =====================================================
# SCHEMAS
# =====================================================

class OverrideRequest(BaseModel):
    force_store_open: Optional[bool] = None
    force_cod_enabled: Optional[bool] = None
    override_max_quantity: Optional[int] = Field(None, ge=1)
    reason: str = Field(..., max_length=MAX_OVERRIDE_REASON)


# =====================================================
# LIST / READ
# =====================================================

@router.get("/seller-settings")
async def list_seller_settings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    status: Literal["all", "open", "closed", "maintenance"] = Query("all"),
    admin=Depends(require_capability(Capability.MANAGE_ANY_SETTINGS)),
    store=Depends(get_settings_store),
):
    items, total = await store.list_settings(status=status, page=page, limit=limit)

    return {
        "settings": serialize_settings_list(items),
        "pagination": {
            "current_page": page,
            "total_pages": (total + limit - 1) // limit,
            "total_items": total,
            "items_per_page": limit,
        },
    }


@router.get("/seller-settings/{seller_id}")
async def get_seller_settings(
    seller_id: str,
    admin=Depends(require_capability(Capability.MANAGE_ANY_SETTINGS)),
    store=Depends(get_settings_store),
):
    settings = await store.get(parse_object_id(seller_id, "seller_id"))
    if not settings:
        raise HTTPException(404, "Seller settings not found")

    return {"data": serialize_settings(settings)}


# =====================================================
# OVERRIDES
# =====================================================

@router.put("/seller-settings/{seller_id}/override")
async def apply_override(
    seller_id: str,
    data: OverrideRequest,
    admin=Depends(require_capability(Capability.OVERRIDE_SETTINGS)),
    db=Depends(get_db),
    overrides=Depends(get_override_manager),
):
    seller_oid = parse_object_id(seller_id, "seller_id")

    settings = await overrides.apply(
        seller_oid,
        reason=data.reason,
        admin_id=str(admin["_id"]),
        force_store_open=data.force_store_open,
        force_cod_enabled=data.force_cod_enabled,
        override_max_quantity=data.override_max_quantity,
    )

    await log_audit(
        db,
        actor_id=str(admin["_id"]),
        actor_role="admin",
        action="STORE_SETTINGS_OVERRIDE_APPLIED",
        metadata={
            "seller_id": seller_id,
            "reason": settings.admin_overrides.override_reason,
        },
    )

    return {
        "message": "Admin override applied successfully",
        "data": serialize_settings(settings),
    }


@router.delete("/seller-settings/{seller_id}/override")
async def remove_override(
    seller_id: str,
    admin=Depends(require_capability(Capability.OVERRIDE_SETTINGS)),
    db=Depends(get_db),
    overrides=Depends(get_override_manager),
):
    settings = await overrides.remove(parse_object_id(seller_id, "seller_id"))

    await log_audit(
        db,
        actor_id=str(admin["_id"]),
        actor_role="admin",
        action="STORE_SETTINGS_OVERRIDE_REMOVED",
        metadata={"seller_id": seller_id},
    )

    return {
        "message": "Admin overrides removed successfully",
        "data": serialize_settings(settings),
    }


# =====================================================
# FORCED UPDATE
# =====================================================

@router.put("/seller-settings/{seller_id}/force-update")
async def force_update_settings(
    seller_id: str,
    data: AdminForceUpdate,
    admin=Depends(require_capability(Capability.MANAGE_ANY_SETTINGS)),
    db=Depends(get_db),
    store=Depends(get_settings_store),
    cache=Depends(get_settings_cache),
):
    seller_oid = parse_object_id(seller_id, "seller_id")
    sections = data.sections()

    settings = await store.update(
        seller_oid,
        *sections,
        stamp={
            "last_updated_by": str(admin["_id"]),
            "last_admin_update": datetime.utcnow(),
        },
    )
    await cache.invalidate(settings_key(settings.seller_id))

    await log_audit(
        db,
        actor_id=str(admin["_id"]),
        actor_role="admin",
        action="STORE_SETTINGS_FORCE_UPDATED",
        metadata={
            "seller_id": seller_id,
            "sections": sorted(data.model_dump(exclude_none=True)),
        },
    )

    return {
        "message": "Seller settings updated by admin successfully",
        "data": serialize_settings(settings),
    }


# =====================================================
# ANALYTICS
# =====================================================

@router.get("/settings-analytics")
async def settings_analytics(
    admin=Depends(require_capability(Capability.MANAGE_ANY_SETTINGS)),
    store=Depends(get_settings_store),
):
    return {"data": await store.analytics()}
