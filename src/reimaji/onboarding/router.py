"""Onboarding API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import get_current_user
from reimaji.database import get_session
from reimaji.db.models import Onboarding, User
from reimaji.onboarding import service
from reimaji.onboarding.schemas import OnboardingResponse, StepUpdateRequest

router = APIRouter(prefix="/api/v1/onboarding", tags=["Onboarding"])


def _to_response(record: Onboarding) -> OnboardingResponse:
    return OnboardingResponse(
        steps=record.steps or {},
        completed=service.is_complete(record),
        updated_at=record.updated_at,
    )


@router.get("", response_model=OnboardingResponse | None)
async def get_onboarding(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> OnboardingResponse | None:
    """The caller's checklist, or null before the first step."""
    record = await service.get_status(db, user.id)
    return _to_response(record) if record is not None else None


@router.post("/steps", response_model=OnboardingResponse)
async def update_onboarding_step(
    body: StepUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> OnboardingResponse:
    record = await service.update_step(db, user.id, body.step, body.completed)
    await db.commit()
    return _to_response(record)


@router.post("/complete", response_model=OnboardingResponse)
async def complete_onboarding(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> OnboardingResponse:
    record = await service.complete(db, user.id)
    await db.commit()
    return _to_response(record)
