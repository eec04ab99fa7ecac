from enum import Enum
from typing import Optional


class Role(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


class Capability(str, Enum):
    PLACE_ORDER = "place_order"
    MANAGE_OWN_SETTINGS = "manage_own_settings"
    MANAGE_ANY_SETTINGS = "manage_any_settings"
    OVERRIDE_SETTINGS = "override_settings"


ROLE_CAPABILITIES = {
    Role.BUYER: frozenset({Capability.PLACE_ORDER}),
    Role.SELLER: frozenset({Capability.MANAGE_OWN_SETTINGS}),
    Role.ADMIN: frozenset({
        Capability.MANAGE_ANY_SETTINGS,
        Capability.OVERRIDE_SETTINGS,
    }),
}


def parse_role(value) -> Optional[Role]:
    try:
        return Role(value)
    except ValueError:
        return None


def has_capability(role, capability: Capability) -> bool:
    role = role if isinstance(role, Role) else parse_role(role)
    if role is None:
        return False
    return capability in ROLE_CAPABILITIES[role]
