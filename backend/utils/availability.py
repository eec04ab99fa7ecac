"""
Store availability: decides whether a seller's store accepts an order.

The decision is a pure function of the resolved settings and the order
context. Guards run in order and the first one that objects decides:

    1. store open        (bypassed by admin force_store_open)
    2. maintenance       (bypassed by admin force_store_open)
    3. business hours    (bypassed by admin force_store_open)
    4. quantity cap      (admin override_max_quantity replaces the cap)
    5. COD               (admin force_cod_enabled enables COD)

Guards 4 and 5 always run.
"""

from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from config.constants import WEEKDAYS
from config.env import STORE_TIMEZONE
from models.admission import AdmissionDecision, OrderContext, PaymentMethod, ReasonCode
from models.store_settings import StoreSettings


def effective_max_quantity(settings: StoreSettings) -> int:
    # An override of 0 is indistinguishable from no override and falls
    # back to the store's own cap.
    return (
        settings.admin_overrides.override_max_quantity
        or settings.max_order_quantity_per_user
    )


def cod_enabled(settings: StoreSettings) -> bool:
    return settings.admin_overrides.force_cod_enabled or settings.cod_settings.is_enabled


# ======================================================
# GUARDS
# ======================================================

def store_open_guard(settings: StoreSettings, order: OrderContext, now: datetime):
    if not settings.is_store_open:
        return AdmissionDecision.reject(
            ReasonCode.STORE_CLOSED,
            "Store is currently closed. Please try again later.",
        )
    return None


def maintenance_guard(settings: StoreSettings, order: OrderContext, now: datetime):
    maintenance = settings.maintenance_mode
    if not maintenance.is_enabled:
        return None

    end_time = maintenance.estimated_end_time
    return AdmissionDecision.reject(
        ReasonCode.MAINTENANCE,
        maintenance.message or "Store is under maintenance",
        maintenance_message=maintenance.message,
        estimated_end_time=end_time.isoformat() if end_time else None,
    )


def business_hours_guard(settings: StoreSettings, order: OrderContext, now: datetime):
    day = WEEKDAYS[now.weekday()]
    schedule = settings.schedule_for(day)

    # no entry for the day: nothing restricts it
    if schedule is None:
        return None

    if not schedule.is_open:
        return AdmissionDecision.reject(
            ReasonCode.CLOSED_TODAY,
            f"Store is closed on {day}s",
            day=day,
        )

    slots = schedule.order_time_slots
    if not slots:
        return None

    current = now.strftime("%H:%M")
    if any(s.is_active and s.start_time <= current <= s.end_time for s in slots):
        return None

    active_slots = [s.label for s in slots if s.is_active]
    if active_slots:
        message = f"Orders can only be placed during: {', '.join(active_slots)}"
    else:
        message = f"No order time slots are active on {day}s"

    return AdmissionDecision.reject(
        ReasonCode.OUTSIDE_ORDER_HOURS,
        message,
        day=day,
        current_time=current,
        active_slots=active_slots,
    )


def quantity_guard(settings: StoreSettings, order: OrderContext, now: datetime):
    cap = effective_max_quantity(settings)
    if order.quantity > cap:
        return AdmissionDecision.reject(
            ReasonCode.QUANTITY_EXCEEDED,
            f"Maximum {cap} items allowed per order",
            max_quantity_allowed=cap,
            requested_quantity=order.quantity,
        )
    return None


def cod_guard(settings: StoreSettings, order: OrderContext, now: datetime):
    if order.payment_method != PaymentMethod.COD:
        return None

    if not cod_enabled(settings):
        return AdmissionDecision.reject(
            ReasonCode.COD_DISABLED,
            "Cash on Delivery is not available for this store. Please choose prepaid payment.",
            cod_available=False,
        )

    cod = settings.cod_settings
    if order.amount < cod.min_order_amount_for_cod:
        return AdmissionDecision.reject(
            ReasonCode.COD_AMOUNT_TOO_LOW,
            f"Minimum order amount for COD is ₹{cod.min_order_amount_for_cod:g}",
            min_cod_amount=cod.min_order_amount_for_cod,
        )

    if order.amount > cod.max_order_amount_for_cod:
        return AdmissionDecision.reject(
            ReasonCode.COD_AMOUNT_TOO_HIGH,
            f"Maximum order amount for COD is ₹{cod.max_order_amount_for_cod:g}",
            max_cod_amount=cod.max_order_amount_for_cod,
        )

    return None


SCHEDULE_GUARDS = (store_open_guard, maintenance_guard, business_hours_guard)
ORDER_GUARDS = (quantity_guard, cod_guard)


# ======================================================
# EVALUATOR
# ======================================================

class AvailabilityEvaluator:
    """
    Naive evaluation times are taken as store-local wall clock time;
    aware ones are converted to the store timezone first.
    """

    def __init__(
        self,
        timezone: str = STORE_TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.tz = ZoneInfo(timezone)
        self.clock = clock or (lambda: datetime.now(self.tz))

    def local_time(self, evaluation_time: Optional[datetime]) -> datetime:
        if evaluation_time is None:
            evaluation_time = self.clock()
        if evaluation_time.tzinfo is None:
            return evaluation_time
        return evaluation_time.astimezone(self.tz)

    def evaluate(self, settings: StoreSettings, order: OrderContext) -> AdmissionDecision:
        now = self.local_time(order.evaluation_time)
        forced_open = settings.admin_overrides.force_store_open

        guards = ORDER_GUARDS if forced_open else SCHEDULE_GUARDS + ORDER_GUARDS
        for guard in guards:
            decision = guard(settings, order, now)
            if decision is not None:
                return decision

        decision = AdmissionDecision.allow()
        if forced_open:
            decision.details["admin_override"] = True
        return decision
