"""Badge award service with duplicate prevention and notification."""

from __future__ import annotations

import json
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.db.base import utcnow
from reimaji.db.models import Badge, UserBadge

logger = logging.getLogger(__name__)

BADGE_EARNED_CHANNEL = "pubsub:badge_earned"


async def get_badge_by_key(db: AsyncSession, key: str) -> Badge | None:
    """Fetch a badge definition by key."""
    result = await db.execute(select(Badge).where(Badge.key == key))
    return result.scalar_one_or_none()


async def get_or_create_badge(
    db: AsyncSession,
    key: str,
    title: str | None = None,
    description: str | None = None,
) -> Badge:
    badge = await get_badge_by_key(db, key)
    if badge is not None:
        return badge
    badge = Badge(
        key=key,
        title=title or key.replace("_", " ").title(),
        description=description or "",
    )
    db.add(badge)
    await db.flush()
    return badge


async def has_badge(db: AsyncSession, user_id: int, badge_id: int) -> bool:
    """Check if user already has a specific badge."""
    result = await db.execute(
        select(UserBadge.id).where(
            UserBadge.user_id == user_id,
            UserBadge.badge_id == badge_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def award_badge(
    db: AsyncSession,
    user_id: int,
    key: str,
    title: str | None = None,
    description: str | None = None,
    redis: object = None,
) -> bool:
    """Award a badge to a user.

    The badge definition is created on first use. Returns True if newly
    earned, False if the user already holds it.
    """
    badge = await get_or_create_badge(db, key, title, description)

    if await has_badge(db, user_id, badge.id):
        return False

    try:
        async with db.begin_nested():
            db.add(UserBadge(user_id=user_id, badge_id=badge.id, created_at=utcnow()))
    except IntegrityError:
        return False  # Race condition: badge already awarded

    logger.info("Badge awarded: user=%s badge=%s", user_id, key)
    await _emit_badge_earned(redis, user_id, badge)
    return True


async def list_user_badges(db: AsyncSession, user_id: int) -> list[dict]:
    """Badges held by a user, oldest first."""
    result = await db.execute(
        select(Badge, UserBadge.created_at)
        .join(UserBadge, UserBadge.badge_id == Badge.id)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.created_at, UserBadge.id)
    )
    return [
        {
            "key": badge.key,
            "title": badge.title,
            "description": badge.description,
            "earned_at": earned_at,
        }
        for badge, earned_at in result.all()
    ]


async def list_badges(db: AsyncSession) -> list[Badge]:
    result = await db.execute(select(Badge).order_by(Badge.id))
    return list(result.scalars().all())


async def _emit_badge_earned(redis: object, user_id: int, badge: Badge) -> None:
    """Publish a badge-earned event for live listeners."""
    if redis is None:
        return
    try:
        await redis.publish(  # type: ignore[attr-defined]
            BADGE_EARNED_CHANNEL,
            json.dumps({
                "user_id": user_id,
                "badge_key": badge.key,
                "badge_title": badge.title,
            }),
        )
    except Exception:
        logger.warning("Failed to publish badge_earned notification", exc_info=True)
