from fastapi import APIRouter, Depends, Query

from models.admission import OrderContext, PaymentMethod
from utils.dependencies import get_admission_gateway, get_settings_store
from utils.guards import parse_object_id
from utils.serializers import serialize_decision
from utils.store_policies import (
    cancellation_policy,
    return_eligibility,
    return_policy,
    store_hours,
)

router = APIRouter(prefix="/stores", tags=["Public"])


# =====================================================
# STORE HOURS / POLICIES
# =====================================================

@router.get("/{seller_id}/hours")
async def get_store_hours(
    seller_id: str,
    store=Depends(get_settings_store),
):
    settings = await store.get(parse_object_id(seller_id, "seller_id"))
    return store_hours(settings)


@router.get("/{seller_id}/return-policy")
async def get_return_policy(
    seller_id: str,
    store=Depends(get_settings_store),
):
    settings = await store.get(parse_object_id(seller_id, "seller_id"))
    return {
        **return_policy(settings),
        "returns": return_eligibility(settings),
        "cancellation": cancellation_policy(settings),
    }


# =====================================================
# AVAILABILITY (no order is placed)
# =====================================================

@router.get("/{seller_id}/availability")
async def get_store_availability(
    seller_id: str,
    quantity: int = Query(1, gt=0),
    amount: float = Query(0, ge=0),
    payment_method: PaymentMethod = Query(PaymentMethod.ONLINE),
    gateway=Depends(get_admission_gateway),
):
    order = OrderContext(
        seller_id=str(parse_object_id(seller_id, "seller_id")),
        quantity=quantity,
        amount=amount,
        payment_method=payment_method,
    )
    result = await gateway.check(order)

    return serialize_decision(result.decision)
