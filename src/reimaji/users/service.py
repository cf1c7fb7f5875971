"""User management business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from reimaji.auth.roles import Role
from reimaji.auth.service import get_user_by_clerk_id, get_user_by_id
from reimaji.db.base import utcnow
from reimaji.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def create_user(
    db: AsyncSession,
    clerk_user_id: str,
    role: str,
    email: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """
    Create a user with an explicit role.

    Raises:
        ValueError: If a user already exists for the identity.
    """
    if await get_user_by_clerk_id(db, clerk_user_id) is not None:
        msg = "User already exists"
        raise ValueError(msg)
    user = User(
        clerk_user_id=clerk_user_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    db.add(user)
    await db.flush()
    return user


async def list_users(db: AsyncSession) -> list[User]:
    """All users, newest first, including soft-deleted ones."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def update_role(db: AsyncSession, target_user_id: int, role: str) -> User:
    """
    Change a user's role.

    Raises:
        ValueError: If the target user does not exist.
    """
    user = await get_user_by_id(db, target_user_id)
    if user is None:
        msg = "User not found"
        raise ValueError(msg)
    previous = user.role
    user.role = role
    user.updated_at = utcnow()
    await db.flush()
    logger.info("role_updated", target_user_id=user.id, previous=previous, role=role)
    return user


async def role_stats(db: AsyncSession) -> dict[str, object]:
    """Count users per role. Every role appears, even with zero users."""
    result = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    counts = {r.value: 0 for r in Role}
    for role, count in result.all():
        counts[role] = count
    return {"total": sum(counts.values()), "counts": counts}


async def delete_account(db: AsyncSession, user: User) -> User:
    """Soft-delete the account. The identity can no longer authenticate."""
    now = utcnow()
    user.deleted_at = now
    user.updated_at = now
    await db.flush()
    logger.info("account_deleted", user_id=user.id)
    return user
