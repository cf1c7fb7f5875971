"""Research API: public listing and detail, admin CRUD and stats."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import get_current_user_optional, require_admin
from reimaji.config import get_settings
from reimaji.content.schemas import (
    ContentStatsResponse,
    ResearchAdminResponse,
    ResearchCreateRequest,
    ResearchDetail,
    ResearchListItem,
    ResearchUpdateRequest,
)
from reimaji.content.service import ContentService, is_locked_for, is_visible_to
from reimaji.database import get_session
from reimaji.db.models import Research, User

router = APIRouter(prefix="/api/v1/research", tags=["Research"])


@router.get("", response_model=list[ResearchListItem])
async def list_research(
    q: str | None = Query(default=None, max_length=200),
    tag: str | None = None,
    limit: int | None = Query(default=None, ge=0, le=500),
    db: AsyncSession = Depends(get_session),
) -> list[Research]:
    """Published research summaries, newest first."""
    return await ContentService(db, Research).list_published(q=q, tag=tag, limit=limit)


@router.get("/admin/all", response_model=list[ResearchAdminResponse])
async def list_all_research(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> list[Research]:
    return await ContentService(db, Research).list_all()


@router.get("/admin/stats", response_model=ContentStatsResponse)
async def research_stats(
    limit_top: int | None = Query(default=None, ge=1, le=50),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict:
    return await ContentService(db, Research).stats(limit_top or get_settings().stats_top_default)


@router.get("/admin/{research_id}", response_model=ResearchAdminResponse)
async def get_research_by_id(
    research_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Research:
    item = await ContentService(db, Research).get_by_id(research_id)
    if item is None:
        raise HTTPException(404, "Research not found")
    return item


@router.post("", response_model=ResearchAdminResponse, status_code=201)
async def create_research(
    body: ResearchCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Research:
    item = await ContentService(db, Research).create(admin, body.model_dump())
    await db.commit()
    return item


@router.patch("/{research_id}", response_model=ResearchAdminResponse)
async def update_research(
    research_id: int,
    body: ResearchUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Research:
    try:
        item = await ContentService(db, Research).update(
            research_id, body.model_dump(exclude_unset=True, exclude_none=True)
        )
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return item


@router.delete("/{research_id}", response_model=ResearchAdminResponse)
async def remove_research(
    research_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Research:
    try:
        item = await ContentService(db, Research).remove(research_id)
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return item


@router.get("/{slug}", response_model=ResearchDetail)
async def get_research(
    slug: str,
    viewer: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> ResearchDetail:
    """Research detail with premium gating."""
    item = await ContentService(db, Research).get_by_slug(slug)
    if item is None or not is_visible_to(item, viewer):
        raise HTTPException(404, "Research not found")
    detail = ResearchDetail.model_validate(item)
    if is_locked_for(item, viewer):
        detail = detail.model_copy(update={"content": None, "locked": True})
    return detail
