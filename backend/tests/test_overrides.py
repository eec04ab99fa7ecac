import pytest
from bson import ObjectId

from utils.errors import SettingsNotFound, SettingsValidationError
from utils.overrides import OverrideManager
from utils.settings_cache import settings_key
from utils.settings_store import SettingsStore


@pytest.fixture
def store(db):
    return SettingsStore(db)


@pytest.fixture
def manager(store, cache):
    return OverrideManager(store, cache)


@pytest.mark.parametrize("reason", ["", "   ", None])
def test_reason_is_required(run, manager, seller_id, reason):
    with pytest.raises(SettingsValidationError):
        run(manager.apply(seller_id, reason=reason, admin_id="admin", force_store_open=True))


def test_override_max_quantity_must_be_positive(run, manager, seller_id):
    with pytest.raises(SettingsValidationError) as exc:
        run(manager.apply(seller_id, reason="bulk buyer", admin_id="admin", override_max_quantity=0))

    assert exc.value.data["errors"]


def test_apply_stamps_and_persists(run, manager, store, seller_id):
    admin_id = ObjectId()

    settings = run(manager.apply(
        seller_id,
        reason="  festival sale  ",
        admin_id=admin_id,
        force_store_open=True,
        override_max_quantity=25,
    ))

    overrides = settings.admin_overrides
    assert overrides.force_store_open is True
    assert overrides.force_cod_enabled is False
    assert overrides.override_max_quantity == 25
    assert overrides.override_reason == "festival sale"
    assert overrides.overridden_by == str(admin_id)
    assert overrides.overridden_at is not None

    stored = run(store.get(seller_id))
    assert stored.admin_overrides.in_effect


def test_new_override_replaces_previous_one(run, manager, seller_id):
    run(manager.apply(seller_id, reason="first", admin_id="a", force_cod_enabled=True))

    settings = run(manager.apply(seller_id, reason="second", admin_id="a", override_max_quantity=3))

    assert settings.admin_overrides.force_cod_enabled is False
    assert settings.admin_overrides.override_max_quantity == 3


def test_apply_invalidates_cached_settings(run, manager, cache, make_settings, seller_id):
    key = settings_key(seller_id)
    run(cache.set(key, make_settings()))

    run(manager.apply(seller_id, reason="audit", admin_id="admin", force_store_open=True))

    assert run(cache.get(key)) is None


def test_remove_clears_every_override(run, manager, store, cache, seller_id):
    run(manager.apply(
        seller_id,
        reason="promo",
        admin_id="admin",
        force_store_open=True,
        force_cod_enabled=True,
        override_max_quantity=40,
    ))
    run(cache.set(settings_key(seller_id), run(store.get(seller_id))))

    settings = run(manager.remove(seller_id))

    assert not settings.admin_overrides.in_effect
    assert settings.admin_overrides.override_reason == ""
    assert run(cache.get(settings_key(seller_id))) is None


def test_remove_without_record_is_not_found(run, manager):
    with pytest.raises(SettingsNotFound):
        run(manager.remove(ObjectId()))
