"""Analytics event recording and KPI aggregation."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.content.service import ContentService
from reimaji.db.base import utcnow
from reimaji.db.models import Conversion, News, PageView, Research, User, UserAction

logger = logging.getLogger(__name__)

NEW_USER_WINDOW = timedelta(days=30)

# Actions that count as a view of a content item identified by metadata["slug"]
VIEW_ACTIONS: dict[str, type] = {
    "news_view": News,
    "research_view": Research,
}


class AnalyticsService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def track_page_view(
        self,
        path: str,
        user: User | None = None,
        load_time: float | None = None,
        referrer: str | None = None,
        user_agent: str | None = None,
    ) -> PageView:
        view = PageView(
            user_id=user.id if user else None,
            path=path,
            load_time=load_time,
            referrer=referrer,
            user_agent=user_agent,
            timestamp=utcnow(),
        )
        self.db.add(view)
        await self.db.flush()
        return view

    async def track_action(
        self,
        user: User | None,
        action: str,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """Record an action. Anonymous actions are dropped. Returns whether recorded."""
        if user is None:
            return False
        metadata = metadata or {}
        self.db.add(UserAction(
            user_id=user.id,
            action=action,
            action_metadata=metadata,
            timestamp=utcnow(),
        ))

        model = VIEW_ACTIONS.get(action)
        slug = metadata.get("slug")
        if model is not None and isinstance(slug, str) and slug:
            counted = await ContentService(self.db, model).increment_views(slug)
            if not counted:
                logger.debug("View for unknown %s slug=%s", model.__tablename__, slug)

        await self.db.flush()
        return True

    async def track_conversion(
        self,
        user: User | None,
        conversion_type: str,
        value: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """Record a conversion for an authenticated user. Returns whether recorded."""
        if user is None:
            return False
        self.db.add(Conversion(
            user_id=user.id,
            conversion_type=conversion_type,
            value=value,
            conversion_metadata=metadata or {},
            timestamp=utcnow(),
        ))
        await self.db.flush()
        return True

    async def kpis(self) -> dict[str, int]:
        """Headline numbers for the admin dashboard."""
        since = utcnow() - NEW_USER_WINDOW

        total_users = await self._count(select(func.count(User.id)).where(User.deleted_at.is_(None)))
        new_users = await self._count(
            select(func.count(User.id)).where(User.deleted_at.is_(None), User.created_at > since)
        )
        completions = await self._count(
            select(func.count(Conversion.id)).where(Conversion.conversion_type == "course_complete")
        )
        subscriptions = await self._count(
            select(func.count(Conversion.id)).where(Conversion.conversion_type == "subscription_start")
        )
        return {
            "total_users": total_users,
            "new_users_last_30_days": new_users,
            "total_course_completions": completions,
            "total_subscriptions": subscriptions,
        }

    async def _count(self, query: Any) -> int:  # noqa: ANN401
        result = await self.db.execute(query)
        return result.scalar() or 0
