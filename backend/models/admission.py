from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator


class PaymentMethod(str, Enum):
    COD = "COD"
    ONLINE = "ONLINE"


class ReasonCode(str, Enum):
    STORE_CLOSED = "STORE_CLOSED"
    MAINTENANCE = "MAINTENANCE"
    CLOSED_TODAY = "CLOSED_TODAY"
    OUTSIDE_ORDER_HOURS = "OUTSIDE_ORDER_HOURS"
    QUANTITY_EXCEEDED = "QUANTITY_EXCEEDED"
    COD_DISABLED = "COD_DISABLED"
    COD_AMOUNT_TOO_LOW = "COD_AMOUNT_TOO_LOW"
    COD_AMOUNT_TOO_HIGH = "COD_AMOUNT_TOO_HIGH"


class OrderRequest(BaseModel):
    """What the order-placement workflow submits for admission."""

    seller_id: str
    quantity: int = Field(..., gt=0)
    amount: float = Field(0, ge=0)
    payment_method: PaymentMethod = PaymentMethod.ONLINE

    @field_validator("seller_id", mode="before")
    @classmethod
    def _seller_object_id(cls, value):
        value = str(value or "").strip()
        if not ObjectId.is_valid(value):
            raise ValueError("Invalid seller_id")
        # canonical lowercase hex, the form cache keys are built from
        return str(ObjectId(value))

    @field_validator("payment_method", mode="before")
    @classmethod
    def _upper_payment_method(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class OrderContext(OrderRequest):
    # None means "now" in the store timezone
    evaluation_time: Optional[datetime] = None


class AdmissionDecision(BaseModel):
    allowed: bool
    reason_code: Optional[ReasonCode] = None
    message: str = ""
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def allow(cls, message: str = "Store is accepting orders") -> "AdmissionDecision":
        return cls(allowed=True, message=message)

    @classmethod
    def reject(cls, reason_code: ReasonCode, message: str, **details) -> "AdmissionDecision":
        return cls(allowed=False, reason_code=reason_code, message=message, details=details)
