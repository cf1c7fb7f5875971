"""News API: public listing and detail, admin CRUD and stats."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import get_current_user_optional, require_admin
from reimaji.config import get_settings
from reimaji.content.schemas import (
    ContentStatsResponse,
    NewsAdminResponse,
    NewsCreateRequest,
    NewsDetail,
    NewsListItem,
    NewsType,
    NewsUpdateRequest,
)
from reimaji.content.service import ContentService, is_locked_for, is_visible_to
from reimaji.database import get_session
from reimaji.db.models import News, User

router = APIRouter(prefix="/api/v1/news", tags=["News"])


def _detail(item: News, viewer: User | None) -> NewsDetail:
    detail = NewsDetail.model_validate(item)
    if is_locked_for(item, viewer):
        return detail.model_copy(update={"content": None, "locked": True})
    return detail


# ---- Public ----


@router.get("", response_model=list[NewsListItem])
async def list_news(
    q: str | None = Query(default=None, max_length=200),
    tag: str | None = None,
    type: NewsType | None = None,  # noqa: A002
    limit: int | None = Query(default=None, ge=0, le=500),
    db: AsyncSession = Depends(get_session),
) -> list[News]:
    """Published news, newest first."""
    return await ContentService(db, News).list_published(q=q, tag=tag, type_=type, limit=limit)


# ---- Admin ----


@router.get("/admin/all", response_model=list[NewsAdminResponse])
async def list_all_news(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> list[News]:
    """Every news item including drafts."""
    return await ContentService(db, News).list_all()


@router.get("/admin/stats", response_model=ContentStatsResponse)
async def news_stats(
    limit_top: int | None = Query(default=None, ge=1, le=50),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict:
    return await ContentService(db, News).stats(limit_top or get_settings().stats_top_default)


@router.get("/admin/{news_id}", response_model=NewsAdminResponse)
async def get_news_by_id(
    news_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> News:
    item = await ContentService(db, News).get_by_id(news_id)
    if item is None:
        raise HTTPException(404, "News not found")
    return item


@router.post("", response_model=NewsAdminResponse, status_code=201)
async def create_news(
    body: NewsCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> News:
    item = await ContentService(db, News).create(admin, body.model_dump())
    await db.commit()
    return item


@router.patch("/{news_id}", response_model=NewsAdminResponse)
async def update_news(
    news_id: int,
    body: NewsUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> News:
    try:
        item = await ContentService(db, News).update(
            news_id, body.model_dump(exclude_unset=True, exclude_none=True)
        )
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return item


@router.delete("/{news_id}", response_model=NewsAdminResponse)
async def remove_news(
    news_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> News:
    """Soft-delete a news item."""
    try:
        item = await ContentService(db, News).remove(news_id)
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return item


# ---- Detail (declared last so /admin/* wins) ----


@router.get("/{slug}", response_model=NewsDetail)
async def get_news(
    slug: str,
    viewer: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> NewsDetail:
    """News detail. Premium bodies are withheld from guest and free readers."""
    item = await ContentService(db, News).get_by_slug(slug)
    if item is None or not is_visible_to(item, viewer):
        raise HTTPException(404, "News not found")
    return _detail(item, viewer)
