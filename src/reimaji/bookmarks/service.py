"""Bookmark storage."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from reimaji.db.models import Bookmark

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def list_by_user(db: AsyncSession, user_id: int, kind: str | None = None) -> list[Bookmark]:
    """A user's bookmarks, newest first, optionally of one kind."""
    query = select(Bookmark).where(Bookmark.user_id == user_id)
    if kind is not None:
        query = query.where(Bookmark.kind == kind)
    result = await db.execute(query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc()))
    return list(result.scalars().all())


async def get_bookmark(db: AsyncSession, user_id: int, kind: str, entity_id: str) -> Bookmark | None:
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.user_id == user_id,
            Bookmark.kind == kind,
            Bookmark.entity_id == entity_id,
        )
    )
    return result.scalar_one_or_none()


async def is_bookmarked(db: AsyncSession, user_id: int, kind: str, entity_id: str) -> bool:
    return await get_bookmark(db, user_id, kind, entity_id) is not None


async def toggle(db: AsyncSession, user_id: int, kind: str, entity_id: str) -> bool:
    """Add the bookmark if absent, remove it if present. Returns the new state."""
    existing = await get_bookmark(db, user_id, kind, entity_id)
    if existing is not None:
        await db.delete(existing)
        await db.flush()
        return False

    try:
        async with db.begin_nested():
            db.add(Bookmark(user_id=user_id, kind=kind, entity_id=entity_id))
    except IntegrityError:
        pass  # Concurrent toggle already inserted it
    return True
