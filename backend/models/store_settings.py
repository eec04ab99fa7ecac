import re
from datetime import datetime
from typing import List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config.constants import (
    CLOSED_BY_DEFAULT,
    DEFAULT_CLOSE_TIME,
    DEFAULT_MAX_COD_AMOUNT,
    DEFAULT_MAX_ORDER_QUANTITY,
    DEFAULT_OPEN_TIME,
    DEFAULT_ORDER_SLOTS,
    MAX_CANCELLATION_HOURS,
    MAX_CHARGE_PERCENT,
    MAX_MAINTENANCE_MESSAGE,
    MAX_ORDER_QUANTITY_CAP,
    MAX_OVERRIDE_REASON,
    MAX_POLICY_TEXT,
    MAX_PROCESSING_DAYS,
    MAX_REFUND_DAYS,
    MAX_RETURN_DAYS,
    MAX_STORE_DESCRIPTION,
    MIN_ORDER_QUANTITY_CAP,
    NON_CANCELLABLE_STATUSES,
    TIME_PATTERN,
    WEEKDAYS,
)

TIME_REGEX = re.compile(TIME_PATTERN)

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
OrderStatus = Literal["shipped", "out_for_delivery", "delivered"]


def normalize_hhmm(value: str) -> str:
    """
    Validate an "HH:MM" string and zero-pad the hour ("9:05" -> "09:05")
    so that times compare correctly as strings.
    """
    value = (value or "").strip()
    if not TIME_REGEX.match(value):
        raise ValueError("Time must be in HH:MM format")
    hours, minutes = value.split(":")
    return f"{int(hours):02d}:{minutes}"


# ======================================================
# SUB-DOCUMENTS
# ======================================================

class TimeSlot(BaseModel):
    start_time: str
    end_time: str
    is_active: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def _hhmm(cls, value):
        return normalize_hhmm(value)

    @model_validator(mode="after")
    def _start_not_after_end(self):
        # slots never span midnight
        if self.start_time > self.end_time:
            raise ValueError("Slot start_time must not be after end_time")
        return self

    @property
    def label(self) -> str:
        return f"{self.start_time}-{self.end_time}"


class DaySchedule(BaseModel):
    day: Weekday
    is_open: bool = True

    # Stored and validated, never consulted by admission (slots decide)
    open_time: str = DEFAULT_OPEN_TIME
    close_time: str = DEFAULT_CLOSE_TIME

    order_time_slots: List[TimeSlot] = Field(default_factory=list)

    @field_validator("open_time", "close_time")
    @classmethod
    def _hhmm(cls, value):
        return normalize_hhmm(value)


class MaintenanceMode(BaseModel):
    is_enabled: bool = False
    message: str = Field(
        "Store is temporarily under maintenance. Please check back later.",
        max_length=MAX_MAINTENANCE_MESSAGE,
    )
    estimated_end_time: Optional[datetime] = None


class ReturnSettings(BaseModel):
    allow_returns: bool = True
    return_time_limit: int = Field(7, ge=0, le=MAX_RETURN_DAYS)              # days
    return_processing_time: int = Field(3, ge=0, le=MAX_PROCESSING_DAYS)     # days
    return_conditions: str = Field(
        "Product must be unused and in original packaging",
        max_length=MAX_POLICY_TEXT,
    )


class RefundRules(BaseModel):
    allow_refund: bool = True
    refund_time_limit: int = Field(7, ge=0, le=MAX_REFUND_DAYS)              # days
    refund_processing_time: int = Field(5, ge=0, le=MAX_PROCESSING_DAYS)     # days
    refund_charges: float = Field(0, ge=0, le=MAX_CHARGE_PERCENT)            # %
    non_refundable_categories: List[str] = Field(default_factory=list)
    refund_conditions: str = Field(
        "Product must be in original condition with tags intact",
        max_length=MAX_POLICY_TEXT,
    )


class CancellationRules(BaseModel):
    allow_cancellation: bool = True
    cancellation_time_limit: int = Field(24, ge=0, le=MAX_CANCELLATION_HOURS)  # hours
    cancellation_charges: float = Field(0, ge=0, le=MAX_CHARGE_PERCENT)        # %
    non_cancellable_statuses: List[OrderStatus] = Field(
        default_factory=lambda: list(NON_CANCELLABLE_STATUSES)
    )


class CodSettings(BaseModel):
    is_enabled: bool = True
    cod_charges: float = Field(0, ge=0)
    min_order_amount_for_cod: float = Field(0, ge=0)
    max_order_amount_for_cod: float = Field(DEFAULT_MAX_COD_AMOUNT, ge=0)


class AdminOverrides(BaseModel):
    force_store_open: bool = False
    force_cod_enabled: bool = False
    override_max_quantity: Optional[int] = None
    override_reason: str = Field("", max_length=MAX_OVERRIDE_REASON)
    overridden_by: Optional[str] = None
    overridden_at: Optional[datetime] = None

    @field_validator("overridden_by", mode="before")
    @classmethod
    def _stringify_admin(cls, value):
        return str(value) if isinstance(value, ObjectId) else value

    @property
    def in_effect(self) -> bool:
        return (
            self.force_store_open
            or self.force_cod_enabled
            or self.override_max_quantity is not None
        )


# ======================================================
# STORE SETTINGS (one per seller)
# ======================================================

def default_business_hours() -> List[DaySchedule]:
    return [
        DaySchedule(
            day=day,
            is_open=day not in CLOSED_BY_DEFAULT,
            open_time=DEFAULT_OPEN_TIME,
            close_time=DEFAULT_CLOSE_TIME,
            order_time_slots=[
                TimeSlot(start_time=start, end_time=end, is_active=True)
                for start, end in DEFAULT_ORDER_SLOTS
            ],
        )
        for day in WEEKDAYS
    ]


class StoreSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    seller_id: str

    store_description: str = Field("", max_length=MAX_STORE_DESCRIPTION)
    max_order_quantity_per_user: int = Field(
        DEFAULT_MAX_ORDER_QUANTITY,
        ge=MIN_ORDER_QUANTITY_CAP,
        le=MAX_ORDER_QUANTITY_CAP,
    )
    is_store_open: bool = True

    business_hours: List[DaySchedule] = Field(default_factory=default_business_hours)
    maintenance_mode: MaintenanceMode = Field(default_factory=MaintenanceMode)

    return_settings: ReturnSettings = Field(default_factory=ReturnSettings)
    refund_rules: RefundRules = Field(default_factory=RefundRules)
    cancellation_rules: CancellationRules = Field(default_factory=CancellationRules)

    cod_settings: CodSettings = Field(default_factory=CodSettings)
    admin_overrides: AdminOverrides = Field(default_factory=AdminOverrides)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_updated_by: Optional[str] = None
    last_admin_update: Optional[datetime] = None

    @field_validator("seller_id", "last_updated_by", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        return str(value) if isinstance(value, ObjectId) else value

    @classmethod
    def from_doc(cls, doc: dict) -> "StoreSettings":
        doc = {k: v for k, v in doc.items() if k != "_id"}
        # $unset leaves the sub-document absent or empty
        if not doc.get("admin_overrides"):
            doc.pop("admin_overrides", None)
        return cls.model_validate(doc)

    def schedule_for(self, day: str) -> Optional[DaySchedule]:
        return next((d for d in self.business_hours if d.day == day), None)


def new_settings_document(seller_id: ObjectId, now: datetime) -> dict:
    """Mongo document for a seller that has never saved settings."""
    doc = StoreSettings(seller_id=str(seller_id)).model_dump(
        exclude={"created_at", "updated_at", "last_updated_by", "last_admin_update"}
    )
    doc["seller_id"] = seller_id
    doc["created_at"] = now
    doc["updated_at"] = now
    return doc
