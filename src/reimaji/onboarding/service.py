"""Onboarding checklist per user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from reimaji.db.base import utcnow
from reimaji.db.models import ONBOARDING_STEPS, Onboarding

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def get_status(db: AsyncSession, user_id: int) -> Onboarding | None:
    result = await db.execute(select(Onboarding).where(Onboarding.user_id == user_id))
    return result.scalar_one_or_none()


async def _get_or_create(db: AsyncSession, user_id: int) -> Onboarding:
    record = await get_status(db, user_id)
    if record is None:
        record = Onboarding(user_id=user_id, steps={})
        db.add(record)
    return record


async def update_step(db: AsyncSession, user_id: int, step: str, completed: bool) -> Onboarding:
    """Merge one step into the user's checklist."""
    if step not in ONBOARDING_STEPS:
        msg = f"Unknown onboarding step: {step}"
        raise ValueError(msg)
    record = await _get_or_create(db, user_id)
    # JSON columns are not mutation-tracked; assign a new dict
    record.steps = {**(record.steps or {}), step: completed}
    record.updated_at = utcnow()
    await db.flush()
    return record


async def complete(db: AsyncSession, user_id: int) -> Onboarding:
    """Mark every step done."""
    record = await _get_or_create(db, user_id)
    record.steps = {**(record.steps or {}), **{step: True for step in ONBOARDING_STEPS}}
    record.updated_at = utcnow()
    await db.flush()
    return record


def is_complete(record: Onboarding) -> bool:
    steps = record.steps or {}
    return all(steps.get(step) for step in ONBOARDING_STEPS)
