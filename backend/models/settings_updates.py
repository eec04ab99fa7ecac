"""
Partial updates for a seller's store settings, one model per section.

Each model validates its own ranges; unknown keys are dropped. The store
turns `changes()` into a `$set` under the model's `section`.
"""

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config.constants import (
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
    WEEKDAYS,
)
from models.store_settings import DaySchedule, OrderStatus


class SectionUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    section: ClassVar[Optional[str]] = None
    nullable: ClassVar[FrozenSet[str]] = frozenset()

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key in self.nullable
        }


class BasicSettingsUpdate(SectionUpdate):
    store_description: Optional[str] = Field(None, max_length=MAX_STORE_DESCRIPTION)
    max_order_quantity_per_user: Optional[int] = Field(
        None, ge=MIN_ORDER_QUANTITY_CAP, le=MAX_ORDER_QUANTITY_CAP
    )
    is_store_open: Optional[bool] = None


class BusinessHoursUpdate(SectionUpdate):
    # replaces the whole weekly schedule
    business_hours: List[DaySchedule]

    @field_validator("business_hours")
    @classmethod
    def _full_week(cls, value):
        days = [d.day for d in value]
        duplicates = sorted({d for d in days if days.count(d) > 1})
        if duplicates:
            raise ValueError(f"Duplicate schedule for: {', '.join(duplicates)}")

        missing = [d for d in WEEKDAYS if d not in days]
        if missing:
            raise ValueError(f"Missing schedule for: {', '.join(missing)}")

        return sorted(value, key=lambda d: WEEKDAYS.index(d.day))

    def changes(self) -> dict:
        return {"business_hours": [d.model_dump() for d in self.business_hours]}


class MaintenanceModeUpdate(SectionUpdate):
    section: ClassVar[Optional[str]] = "maintenance_mode"
    nullable: ClassVar[FrozenSet[str]] = frozenset({"estimated_end_time"})

    is_enabled: Optional[bool] = None
    message: Optional[str] = Field(None, max_length=MAX_MAINTENANCE_MESSAGE)
    estimated_end_time: Optional[datetime] = None


class ReturnSettingsUpdate(SectionUpdate):
    section: ClassVar[Optional[str]] = "return_settings"

    allow_returns: Optional[bool] = None
    return_time_limit: Optional[int] = Field(None, ge=0, le=MAX_RETURN_DAYS)
    return_processing_time: Optional[int] = Field(None, ge=0, le=MAX_PROCESSING_DAYS)
    return_conditions: Optional[str] = Field(None, max_length=MAX_POLICY_TEXT)


class RefundRulesUpdate(SectionUpdate):
    section: ClassVar[Optional[str]] = "refund_rules"

    allow_refund: Optional[bool] = None
    refund_time_limit: Optional[int] = Field(None, ge=0, le=MAX_REFUND_DAYS)
    refund_processing_time: Optional[int] = Field(None, ge=0, le=MAX_PROCESSING_DAYS)
    refund_charges: Optional[float] = Field(None, ge=0, le=MAX_CHARGE_PERCENT)
    non_refundable_categories: Optional[List[str]] = None
    refund_conditions: Optional[str] = Field(None, max_length=MAX_POLICY_TEXT)


class CancellationRulesUpdate(SectionUpdate):
    section: ClassVar[Optional[str]] = "cancellation_rules"

    allow_cancellation: Optional[bool] = None
    cancellation_time_limit: Optional[int] = Field(None, ge=0, le=MAX_CANCELLATION_HOURS)
    cancellation_charges: Optional[float] = Field(None, ge=0, le=MAX_CHARGE_PERCENT)
    non_cancellable_statuses: Optional[List[OrderStatus]] = None


class CodSettingsUpdate(SectionUpdate):
    section: ClassVar[Optional[str]] = "cod_settings"

    is_enabled: Optional[bool] = None
    cod_charges: Optional[float] = Field(None, ge=0)
    min_order_amount_for_cod: Optional[float] = Field(None, ge=0)
    max_order_amount_for_cod: Optional[float] = Field(None, ge=0)


class AdminOverridesUpdate(SectionUpdate):
    """
    Written as a whole by OverrideManager: every field is sent, so an
    override not named in a new request is switched off.
    """

    section: ClassVar[Optional[str]] = "admin_overrides"
    nullable: ClassVar[FrozenSet[str]] = frozenset({"override_max_quantity"})

    force_store_open: bool = False
    force_cod_enabled: bool = False
    override_max_quantity: Optional[int] = Field(None, ge=1)
    override_reason: str = Field(..., max_length=MAX_OVERRIDE_REASON)
    overridden_by: Optional[str] = None
    overridden_at: Optional[datetime] = None

    def changes(self) -> dict:
        return self.model_dump()


class AdminForceUpdate(BaseModel):
    """Every section at once, for the administrator forced update."""

    model_config = ConfigDict(extra="ignore")

    basic: Optional[BasicSettingsUpdate] = None
    business_hours: Optional[BusinessHoursUpdate] = None
    maintenance_mode: Optional[MaintenanceModeUpdate] = None
    return_settings: Optional[ReturnSettingsUpdate] = None
    refund_rules: Optional[RefundRulesUpdate] = None
    cancellation_rules: Optional[CancellationRulesUpdate] = None
    cod_settings: Optional[CodSettingsUpdate] = None

    def sections(self) -> List[SectionUpdate]:
        return [
            part
            for part in (
                self.basic,
                self.business_hours,
                self.maintenance_mode,
                self.return_settings,
                self.refund_rules,
                self.cancellation_rules,
                self.cod_settings,
            )
            if part is not None
        ]
