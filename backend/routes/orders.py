from fastapi import APIRouter, Depends

from models.admission import OrderContext, OrderRequest, PaymentMethod
from models.user import Capability
from utils.dependencies import get_admission_gateway
from utils.security import require_capability
from utils.serializers import serialize_decision


router = APIRouter(
    prefix="/orders",
    tags=["Orders"]
)


# ======================================================
# ORDER ADMISSION (BUYER)
# ======================================================

@router.post("/admission")
async def check_order_admission(
    data: OrderRequest,
    buyer=Depends(require_capability(Capability.PLACE_ORDER)),
    gateway=Depends(get_admission_gateway),
):
    """
    Gate run before an order is created. Rejections come back as
    403 (503 for maintenance or unreadable settings) with
    {reason_code, message, limits}.
    """
    order = OrderContext(**data.model_dump())
    result = await gateway.admit(order)

    settings = result.settings
    cod_charges = (
        settings.cod_settings.cod_charges
        if order.payment_method == PaymentMethod.COD
        else 0
    )

    return {
        **serialize_decision(result.decision),
        "seller_id": settings.seller_id,
        "cod_charges": cod_charges,
    }
