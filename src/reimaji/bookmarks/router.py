"""Bookmark API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import get_current_user
from reimaji.bookmarks import service
from reimaji.bookmarks.schemas import (
    BookmarkKind,
    BookmarkResponse,
    BookmarkStateResponse,
    BookmarkToggleRequest,
)
from reimaji.database import get_session
from reimaji.db.models import Bookmark, User

router = APIRouter(prefix="/api/v1/bookmarks", tags=["Bookmarks"])


@router.get("", response_model=list[BookmarkResponse])
async def list_bookmarks(
    kind: BookmarkKind | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[Bookmark]:
    return await service.list_by_user(db, user.id, kind)


@router.get("/status", response_model=BookmarkStateResponse)
async def bookmark_status(
    kind: BookmarkKind,
    entity_id: str = Query(min_length=1, max_length=64),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BookmarkStateResponse:
    """Whether the caller has bookmarked an item."""
    bookmarked = await service.is_bookmarked(db, user.id, kind, entity_id)
    return BookmarkStateResponse(kind=kind, entity_id=entity_id, bookmarked=bookmarked)


@router.post("/toggle", response_model=BookmarkStateResponse)
async def toggle_bookmark(
    body: BookmarkToggleRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BookmarkStateResponse:
    bookmarked = await service.toggle(db, user.id, body.kind, body.entity_id)
    await db.commit()
    return BookmarkStateResponse(kind=body.kind, entity_id=body.entity_id, bookmarked=bookmarked)
