"""Role tiers and access rules."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    GUEST = "guest"
    FREE = "free"
    PRO = "pro"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


ADMIN_ROLES = frozenset({Role.ADMIN.value, Role.SUPERADMIN.value})
PREMIUM_ROLES = frozenset({Role.PRO.value, Role.ADMIN.value, Role.SUPERADMIN.value})


def is_valid_role(role: str) -> bool:
    return role in {r.value for r in Role}


def is_admin(role: str | None) -> bool:
    return role in ADMIN_ROLES


def can_access_premium(role: str | None) -> bool:
    """Premium bodies are open to pro and admin tiers. Anonymous viewers count as guest."""
    return (role or Role.GUEST.value) in PREMIUM_ROLES
