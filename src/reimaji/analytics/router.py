"""Analytics API: event tracking and admin KPIs."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.analytics.schemas import (
    ActionRequest,
    ConversionRequest,
    KPIResponse,
    PageViewRequest,
    TrackResponse,
)
from reimaji.analytics.service import AnalyticsService
from reimaji.auth.dependencies import get_current_user_optional, require_admin
from reimaji.database import get_session
from reimaji.db.models import User

router = APIRouter(prefix="/api/v1/analytics", tags=["Analytics"])


@router.post("/page-views", response_model=TrackResponse)
async def track_page_view(
    body: PageViewRequest,
    request: Request,
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> TrackResponse:
    """Record a page view. Works for anonymous visitors."""
    await AnalyticsService(db).track_page_view(
        body.path,
        user=user,
        load_time=body.load_time,
        referrer=body.referrer,
        user_agent=body.user_agent or request.headers.get("user-agent"),
    )
    await db.commit()
    return TrackResponse(recorded=True)


@router.post("/actions", response_model=TrackResponse)
async def track_action(
    body: ActionRequest,
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> TrackResponse:
    recorded = await AnalyticsService(db).track_action(user, body.action, body.metadata)
    await db.commit()
    return TrackResponse(recorded=recorded)


@router.post("/conversions", response_model=TrackResponse)
async def track_conversion(
    body: ConversionRequest,
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> TrackResponse:
    recorded = await AnalyticsService(db).track_conversion(
        user, body.conversion_type, body.value, body.metadata
    )
    await db.commit()
    return TrackResponse(recorded=recorded)


@router.get("/kpis", response_model=KPIResponse)
async def get_kpis(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, int]:
    return await AnalyticsService(db).kpis()
