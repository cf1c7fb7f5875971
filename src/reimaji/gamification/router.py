"""Badge API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import get_current_user
from reimaji.database import get_session
from reimaji.db.models import Badge, User
from reimaji.gamification.badge_service import award_badge, list_badges, list_user_badges
from reimaji.gamification.schemas import (
    AwardRequest,
    AwardResponse,
    BadgeResponse,
    EarnedBadgeResponse,
)
from reimaji.redis_client import get_redis_optional

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


@router.get("/badges", response_model=list[BadgeResponse])
async def get_all_badges(db: AsyncSession = Depends(get_session)) -> list[Badge]:
    """All badge definitions."""
    return await list_badges(db)


@router.get("/users/me/badges", response_model=list[EarnedBadgeResponse])
async def get_my_badges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[dict]:
    return await list_user_badges(db, user.id)


@router.post("/users/me/badges", response_model=AwardResponse)
async def award_my_badge(
    body: AwardRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AwardResponse:
    """Award a badge to the caller. Repeat awards are no-ops."""
    awarded = await award_badge(
        db, user.id, body.key, body.title, body.description, redis=get_redis_optional()
    )
    await db.commit()
    return AwardResponse(key=body.key, awarded=awarded)
