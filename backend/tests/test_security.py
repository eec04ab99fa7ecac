import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

import utils.jwt
from models.user import Capability, Role, has_capability, parse_role
from utils.security import get_current_user, require_capability

SECRET = "test-secret"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(utils.jwt, "JWT_SECRET", SECRET)


def bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.parametrize("role,capability,expected", [
    ("buyer", Capability.PLACE_ORDER, True),
    ("buyer", Capability.MANAGE_OWN_SETTINGS, False),
    ("seller", Capability.MANAGE_OWN_SETTINGS, True),
    ("seller", Capability.OVERRIDE_SETTINGS, False),
    ("admin", Capability.MANAGE_ANY_SETTINGS, True),
    ("admin", Capability.OVERRIDE_SETTINGS, True),
    ("admin", Capability.PLACE_ORDER, False),
    (Role.SELLER, Capability.MANAGE_OWN_SETTINGS, True),
    ("superuser", Capability.PLACE_ORDER, False),
    (None, Capability.PLACE_ORDER, False),
])
def test_role_capabilities(role, capability, expected):
    assert has_capability(role, capability) is expected


def test_parse_role():
    assert parse_role("admin") is Role.ADMIN
    assert parse_role("owner") is None


def test_current_user_from_token(run, db):
    run(db.users.insert_one({"phone": "9000000001", "role": "buyer"}))
    token = jwt.encode({"sub": "9000000001"}, SECRET, algorithm="HS256")

    user = run(get_current_user(credentials=bearer(token), db=db))

    assert user["role"] == "buyer"


@pytest.mark.parametrize("token", [
    "garbage",
    jwt.encode({"sub": "9000000001"}, "other-secret", algorithm="HS256"),
    jwt.encode({"name": "no subject"}, SECRET, algorithm="HS256"),
    jwt.encode({"sub": "9999999999"}, SECRET, algorithm="HS256"),
])
def test_bad_tokens_are_unauthorized(run, db, token):
    run(db.users.insert_one({"phone": "9000000001", "role": "buyer"}))

    with pytest.raises(HTTPException) as exc:
        run(get_current_user(credentials=bearer(token), db=db))

    assert exc.value.status_code == 401


def test_require_capability(run):
    checker = require_capability(Capability.OVERRIDE_SETTINGS)

    assert run(checker(user={"role": "admin"}))["role"] == "admin"

    with pytest.raises(HTTPException) as exc:
        run(checker(user={"role": "seller"}))
    assert exc.value.status_code == 403
