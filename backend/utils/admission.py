import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from pymongo.errors import PyMongoError

from config.env import SETTINGS_STORE_TIMEOUT_SECONDS
from models.admission import AdmissionDecision, OrderContext, ReasonCode
from models.store_settings import StoreSettings
from utils.availability import AvailabilityEvaluator
from utils.errors import PolicyRejection, SettingsStoreUnavailable
from utils.settings_cache import SettingsCache, settings_key
from utils.settings_store import SettingsStore

logger = logging.getLogger(__name__)


def rejection_status(decision: AdmissionDecision) -> int:
    if decision.allowed:
        return 200
    if decision.reason_code == ReasonCode.MAINTENANCE:
        return 503
    return 403


@dataclass
class AdmissionResult:
    decision: AdmissionDecision
    settings: Optional[StoreSettings]
    status_code: int


class AdmissionGateway:
    """
    Resolves a seller's settings (cache first, then store), evaluates the
    order against them and reports the outcome.

    A decision reflects the seller's configuration as of at most one cache
    TTL ago. If the store cannot be read the order is rejected.
    """

    def __init__(
        self,
        store: SettingsStore,
        cache: SettingsCache,
        evaluator: Optional[AvailabilityEvaluator] = None,
        store_timeout: float = SETTINGS_STORE_TIMEOUT_SECONDS,
    ):
        self.store = store
        self.cache = cache
        self.evaluator = evaluator or AvailabilityEvaluator()
        self.store_timeout = store_timeout

    async def resolve_settings(self, seller_id, *, use_cache: bool = True) -> StoreSettings:
        key = settings_key(seller_id)

        if use_cache:
            settings = await self.cache.get(key)
            if settings is not None:
                return settings

        try:
            settings = await asyncio.wait_for(
                self.store.get_or_create(seller_id),
                self.store_timeout,
            )
        except (PyMongoError, asyncio.TimeoutError) as exc:
            raise SettingsStoreUnavailable(
                "Store settings are unavailable",
                seller_id=str(seller_id),
            ) from exc

        await self.cache.set(key, settings)
        return settings

    async def check(self, order: OrderContext, *, use_cache: bool = True) -> AdmissionResult:
        try:
            settings = await self.resolve_settings(order.seller_id, use_cache=use_cache)
        except SettingsStoreUnavailable:
            logger.exception("ADMISSION_SETTINGS_UNAVAILABLE seller=%s", order.seller_id)
            decision = AdmissionDecision.reject(
                ReasonCode.STORE_CLOSED,
                "Store is temporarily unavailable. Please try again later.",
                settings_unavailable=True,
            )
            return AdmissionResult(decision=decision, settings=None, status_code=503)

        decision = self.evaluator.evaluate(settings, order)
        if not decision.allowed:
            logger.info(
                "ORDER_ADMISSION_REJECTED seller=%s reason=%s",
                order.seller_id,
                decision.reason_code.value,
            )

        return AdmissionResult(
            decision=decision,
            settings=settings,
            status_code=rejection_status(decision),
        )

    async def admit(self, order: OrderContext, *, use_cache: bool = True) -> AdmissionResult:
        """
        Result of an accepted order, carrying the settings for use downstream
        without another read. Raises PolicyRejection otherwise.
        """
        result = await self.check(order, use_cache=use_cache)
        if not result.decision.allowed:
            raise PolicyRejection(result.decision, status_code=result.status_code)
        return result
