from fastapi import Depends

from config.env import (
    SETTINGS_CACHE_BACKEND,
    SETTINGS_CACHE_TIMEOUT_SECONDS,
    SETTINGS_CACHE_TTL_SECONDS,
)
from database import get_db
from utils.admission import AdmissionGateway
from utils.overrides import OverrideManager
from utils.settings_cache import MemoryCacheClient, MongoCacheClient, SettingsCache
from utils.settings_store import SettingsStore

_settings_cache = None


def build_settings_cache(backend: str = SETTINGS_CACHE_BACKEND) -> SettingsCache:
    if backend == "memory":
        client = MemoryCacheClient()
    elif backend == "mongo":
        client = MongoCacheClient(get_db())
    else:
        raise RuntimeError(f"Unknown SETTINGS_CACHE_BACKEND: {backend}")

    return SettingsCache(
        client,
        ttl_seconds=SETTINGS_CACHE_TTL_SECONDS,
        timeout_seconds=SETTINGS_CACHE_TIMEOUT_SECONDS,
    )


def get_settings_cache() -> SettingsCache:
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = build_settings_cache()
    return _settings_cache


def get_settings_store(db=Depends(get_db)) -> SettingsStore:
    return SettingsStore(db)


def get_override_manager(
    store: SettingsStore = Depends(get_settings_store),
    cache: SettingsCache = Depends(get_settings_cache),
) -> OverrideManager:
    return OverrideManager(store, cache)


def get_admission_gateway(
    store: SettingsStore = Depends(get_settings_store),
    cache: SettingsCache = Depends(get_settings_cache),
) -> AdmissionGateway:
    return AdmissionGateway(store, cache)
