"""Built-in badge definitions."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.db.models import Badge
from reimaji.gamification.badge_service import get_badge_by_key

logger = logging.getLogger(__name__)

COURSE_COMPLETE = "course_complete"

BADGE_SEED_DATA: list[dict] = [
    {
        "key": COURSE_COMPLETE,
        "title": "Course Complete",
        "description": "Finished every lesson of a course",
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Insert or refresh the built-in badges. Returns number of badges seeded."""
    seeded = 0
    for badge_data in BADGE_SEED_DATA:
        badge = await get_badge_by_key(db, badge_data["key"])
        if badge is None:
            db.add(Badge(**badge_data))
        else:
            badge.title = badge_data["title"]
            badge.description = badge_data["description"]
        seeded += 1

    await db.commit()
    logger.info("Seeded %d badge definitions", seeded)
    return seeded
