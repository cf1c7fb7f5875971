"""
Identity mapping.

Turns verified identity-provider subjects into local users and decides the
role a synced identity receives.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from reimaji.auth.roles import is_valid_role
from reimaji.config import get_settings
from reimaji.db.base import utcnow
from reimaji.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_clerk_id(db: AsyncSession, clerk_user_id: str) -> User | None:
    """Fetch a user by identity-provider subject."""
    result = await db.execute(select(User).where(User.clerk_user_id == clerk_user_id))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Identity sync
# ---------------------------------------------------------------------------


def role_override_for(email: str | None) -> str | None:
    """Return the configured role for an email, if any."""
    if not email:
        return None
    overrides = {k.lower(): v for k, v in get_settings().role_overrides.items()}
    role = overrides.get(email.lower())
    if role is not None and not is_valid_role(role):
        logger.warning("invalid_role_override", email=email, role=role)
        return None
    return role


async def upsert_from_identity(
    db: AsyncSession,
    clerk_user_id: str,
    email: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
) -> tuple[User, bool]:
    """
    Create or refresh the local user for an identity.

    Profile fields are only overwritten when provided. An existing user keeps
    their role unless an override is configured for their email.

    Returns:
        Tuple of (user, created).
    """
    override = role_override_for(email)
    user = await get_user_by_clerk_id(db, clerk_user_id)

    if user is not None:
        if email is not None:
            user.email = email
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if override is not None:
            user.role = override
        user.updated_at = utcnow()
        await db.flush()
        return user, False

    user = User(
        clerk_user_id=clerk_user_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=override or get_settings().default_role,
    )
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, role=user.role)
    return user, True
