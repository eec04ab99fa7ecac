from typing import Optional

from models.store_settings import (
    CancellationRules,
    RefundRules,
    ReturnSettings,
    StoreSettings,
    default_business_hours,
)


def store_hours(settings: Optional[StoreSettings]) -> dict:
    """Schedule shown to buyers. Sellers without a record get the defaults."""
    if settings is None:
        return {
            "business_hours": [d.model_dump() for d in default_business_hours()],
            "is_store_open": True,
            "maintenance_mode": {"is_enabled": False},
        }

    return {
        "business_hours": [d.model_dump() for d in settings.business_hours],
        "is_store_open": settings.is_store_open,
        "maintenance_mode": settings.maintenance_mode.model_dump(mode="json"),
        "admin_overrides": {
            "force_store_open": settings.admin_overrides.force_store_open,
            "force_cod_enabled": settings.admin_overrides.force_cod_enabled,
        },
    }


def return_policy(settings: Optional[StoreSettings]) -> dict:
    returns = settings.return_settings if settings else ReturnSettings()
    refunds = settings.refund_rules if settings else RefundRules()
    cancellation = settings.cancellation_rules if settings else CancellationRules()

    return {
        **returns.model_dump(),
        "refund_rules": refunds.model_dump(),
        "cancellation_rules": cancellation.model_dump(),
    }


def cancellation_policy(settings: Optional[StoreSettings]) -> dict:
    rules = settings.cancellation_rules if settings else CancellationRules()
    if not rules.allow_cancellation:
        return {"allowed": False, "reason": "Cancellation not allowed by seller"}

    return {
        "allowed": True,
        "time_limit_hours": rules.cancellation_time_limit,
        "charges_percent": rules.cancellation_charges,
        "non_cancellable_statuses": list(rules.non_cancellable_statuses),
    }


def return_eligibility(settings: Optional[StoreSettings]) -> dict:
    returns = settings.return_settings if settings else ReturnSettings()
    if not returns.allow_returns:
        return {"allowed": False, "reason": "Returns not allowed by seller"}

    return {
        "allowed": True,
        "time_limit_days": returns.return_time_limit,
        "processing_time_days": returns.return_processing_time,
        "conditions": returns.return_conditions,
    }
