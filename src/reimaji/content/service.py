"""Content service: news and research publishing, listing, gating and stats."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Generic, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.roles import can_access_premium, is_admin
from reimaji.content.sanitize import sanitize_html
from reimaji.content.slugs import slugify, unique_slug
from reimaji.db.base import utcnow
from reimaji.db.models import News, Research, User

logger = logging.getLogger(__name__)

ContentModel = TypeVar("ContentModel", News, Research)

SANITIZED_FIELDS: dict[type, tuple[str, ...]] = {
    News: ("summary", "content"),
    Research: ("summary", "implication", "content"),
}
SEARCH_FIELDS: dict[type, tuple[str, ...]] = {
    News: ("title", "summary", "content"),
    Research: ("title", "summary", "content", "implication"),
}


class ContentService(Generic[ContentModel]):
    """Shared operations for the two editorial content types."""

    def __init__(self, db: AsyncSession, model: type[ContentModel]) -> None:
        self.db = db
        self.model = model

    # --- Public ---

    async def list_published(
        self,
        q: str | None = None,
        tag: str | None = None,
        type_: str | None = None,
        limit: int | None = None,
    ) -> list[ContentModel]:
        """Published, non-deleted items, newest first."""
        m = self.model
        query = select(m).where(m.is_published.is_(True), m.deleted_at.is_(None))

        if type_ is not None and m is News:
            query = query.where(News.type == type_)

        if q is not None and q.strip():
            needle = q.strip().lower()
            query = query.where(
                or_(*(
                    func.lower(getattr(m, field)).contains(needle, autoescape=True)
                    for field in SEARCH_FIELDS[m]
                ))
            )

        query = query.order_by(m.published_at.desc(), m.id.desc())
        result = await self.db.execute(query)
        items = list(result.scalars().all())

        # tags live in a JSON column; filter portably in Python
        if tag:
            items = [item for item in items if tag in (item.tags or [])]
        if limit is not None and limit > 0:
            items = items[:limit]
        return items

    async def get_by_slug(self, slug: str) -> ContentModel | None:
        """Non-deleted item by slug, published or not."""
        result = await self.db.execute(
            select(self.model).where(self.model.slug == slug, self.model.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, item_id: int) -> ContentModel | None:
        item = await self.db.get(self.model, item_id)
        if item is None or item.deleted_at is not None:
            return None
        return item

    # --- Admin ---

    async def list_all(self) -> list[ContentModel]:
        """Every non-deleted item, drafts included."""
        result = await self.db.execute(
            select(self.model)
            .where(self.model.deleted_at.is_(None))
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, author: User, data: dict[str, Any]) -> ContentModel:
        """Insert a new item authored by `author`. Slug derives from the title."""
        fields = self._sanitized(data)
        slug = await unique_slug(self.db, self.model, slugify(fields["title"]))
        now = utcnow()
        is_published = bool(fields.pop("is_published", False))
        item = self.model(
            **fields,
            slug=slug,
            is_published=is_published,
            published_at=now if is_published else None,
            created_by=author.id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(item)
        await self.db.flush()
        logger.info("%s created: id=%s slug=%s", self.model.__tablename__, item.id, slug)
        return item

    async def update(self, item_id: int, changes: dict[str, Any]) -> ContentModel:
        """
        Apply a partial update. The slug stays stable across title edits.

        Raises:
            ValueError: If the item does not exist.
        """
        item = await self.get_by_id(item_id)
        if item is None:
            msg = f"{self.model.__name__} not found"
            raise ValueError(msg)

        fields = self._sanitized(changes)
        if "is_published" in fields:
            self._set_published(item, bool(fields.pop("is_published")))
        for name, value in fields.items():
            setattr(item, name, value)
        item.updated_at = utcnow()
        await self.db.flush()
        return item

    async def remove(self, item_id: int) -> ContentModel:
        """
        Soft-delete and unpublish.

        Raises:
            ValueError: If the item does not exist.
        """
        item = await self.get_by_id(item_id)
        if item is None:
            msg = f"{self.model.__name__} not found"
            raise ValueError(msg)
        now = utcnow()
        item.deleted_at = now
        item.is_published = False
        item.updated_at = now
        await self.db.flush()
        logger.info("%s removed: id=%s", self.model.__tablename__, item.id)
        return item

    async def bulk(self, action: str, ids: list[int]) -> tuple[list[int], list[int]]:
        """Publish, unpublish or remove many items. Returns (updated, missing) ids."""
        updated: list[int] = []
        missing: list[int] = []
        for item_id in dict.fromkeys(ids):
            item = await self.get_by_id(item_id)
            if item is None:
                missing.append(item_id)
                continue
            if action == "remove":
                await self.remove(item_id)
            else:
                self._set_published(item, action == "publish")
                item.updated_at = utcnow()
            updated.append(item_id)
        await self.db.flush()
        return updated, missing

    async def stats(self, limit_top: int = 5) -> dict[str, Any]:
        """Publishing counts, most used tags and most viewed items."""
        items = await self.list_all()
        total_published = sum(1 for item in items if item.is_published)

        tag_freq: Counter[str] = Counter()
        for item in items:
            tag_freq.update(item.tags or [])

        by_views = sorted(items, key=lambda item: item.view_count or 0, reverse=True)
        return {
            "total_published": total_published,
            "total_draft": len(items) - total_published,
            "top_tags": [{"tag": t, "count": c} for t, c in tag_freq.most_common(limit_top)],
            "top_by_views": [
                {"id": item.id, "title": item.title, "view_count": item.view_count}
                for item in by_views[:limit_top]
            ],
        }

    async def increment_views(self, slug: str) -> bool:
        """Count one view of a published item. Returns False when no such item."""
        item = await self.get_by_slug(slug)
        if item is None or not item.is_published:
            return False
        item.view_count = (item.view_count or 0) + 1
        await self.db.flush()
        return True

    # --- Helpers ---

    def _sanitized(self, data: dict[str, Any]) -> dict[str, Any]:
        fields = dict(data)
        for name in SANITIZED_FIELDS[self.model]:
            if fields.get(name) is not None:
                fields[name] = sanitize_html(fields[name])
        return fields

    @staticmethod
    def _set_published(item: News | Research, published: bool) -> None:
        item.is_published = published
        item.published_at = utcnow() if published else None


def is_visible_to(item: News | Research, viewer: User | None) -> bool:
    """Drafts are only visible to admins."""
    if item.is_published:
        return True
    return viewer is not None and is_admin(viewer.role)


def is_locked_for(item: News | Research, viewer: User | None) -> bool:
    """Premium bodies are locked for guest and free viewers."""
    return item.is_premium and not can_access_premium(viewer.role if viewer else None)
