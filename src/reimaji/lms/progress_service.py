"""Lesson completion tracking, course progress and the course badge."""

from __future__ import annotations

import logging

from sqlalchemy import distinct, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.db.base import utcnow
from reimaji.db.models import Course, CourseModule, Lesson, Progress
from reimaji.gamification.badge_service import award_badge
from reimaji.gamification.seed import COURSE_COMPLETE

logger = logging.getLogger(__name__)


def percent_of(part: int, whole: int) -> int:
    """Integer percentage rounded half-up; 0 when `whole` is 0.

    >>> percent_of(1, 8), percent_of(2, 3), percent_of(0, 0)
    (13, 67, 0)
    """
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def is_course_complete(progress: dict) -> bool:
    return progress["total"] > 0 and progress["completed"] >= progress["total"]


def countable_lessons(course_id: int):  # noqa: ANN201
    """Select ids of published, non-deleted lessons in live modules of a live course."""
    return (
        select(Lesson.id)
        .join(CourseModule, CourseModule.id == Lesson.module_id)
        .join(Course, Course.id == CourseModule.course_id)
        .where(
            CourseModule.course_id == course_id,
            Course.deleted_at.is_(None),
            CourseModule.deleted_at.is_(None),
            Lesson.deleted_at.is_(None),
            Lesson.is_published.is_(True),
        )
    )


class ProgressService:
    """Per-user course progress. Completing the last lesson awards the course badge."""

    def __init__(self, db: AsyncSession, redis: object | None = None) -> None:
        self.db = db
        self.redis = redis

    async def _find_lesson(self, course_id: int, lesson_id: int) -> Lesson | None:
        result = await self.db.execute(
            select(Lesson)
            .join(CourseModule, CourseModule.id == Lesson.module_id)
            .join(Course, Course.id == CourseModule.course_id)
            .where(
                Lesson.id == lesson_id,
                CourseModule.course_id == course_id,
                Course.deleted_at.is_(None),
                CourseModule.deleted_at.is_(None),
                Lesson.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def _existing(self, user_id: int, lesson_id: int) -> Progress | None:
        result = await self.db.execute(
            select(Progress).where(Progress.user_id == user_id, Progress.lesson_id == lesson_id)
        )
        return result.scalar_one_or_none()

    async def mark_lesson_complete(self, user_id: int, course_id: int, lesson_id: int) -> dict:
        """Record a completed lesson. Idempotent per (user, lesson).

        Raises:
            ValueError: If the lesson does not belong to a live module of the course.
        """
        lesson = await self._find_lesson(course_id, lesson_id)
        if lesson is None:
            msg = "Lesson not found"
            raise ValueError(msg)

        if await self._existing(user_id, lesson_id) is not None:
            return await self._repeat_outcome(user_id, course_id, lesson_id)

        try:
            async with self.db.begin_nested():
                self.db.add(Progress(
                    user_id=user_id,
                    course_id=course_id,
                    lesson_id=lesson_id,
                    completed_at=utcnow(),
                ))
        except IntegrityError:
            # Concurrent completion of the same lesson
            return await self._repeat_outcome(user_id, course_id, lesson_id)

        progress = await self.get_course_progress(user_id, course_id)
        course_completed = is_course_complete(progress)

        badge_earned = None
        if course_completed:
            awarded = await award_badge(self.db, user_id, COURSE_COMPLETE, redis=self.redis)
            if awarded:
                badge_earned = COURSE_COMPLETE
            logger.info("Course completed: user=%s course=%s", user_id, course_id)

        return {
            "lesson_id": lesson_id,
            "already_completed": False,
            "course_completed": course_completed,
            "badge_earned": badge_earned,
            "progress": progress,
        }

    async def _repeat_outcome(self, user_id: int, course_id: int, lesson_id: int) -> dict:
        """Outcome for a lesson the user had already completed; no badge is awarded."""
        progress = await self.get_course_progress(user_id, course_id)
        return {
            "lesson_id": lesson_id,
            "already_completed": True,
            "course_completed": is_course_complete(progress),
            "badge_earned": None,
            "progress": progress,
        }

    async def get_course_progress(self, user_id: int, course_id: int) -> dict:
        """Completed vs. countable lessons for one user in one course."""
        lesson_ids = countable_lessons(course_id)

        total_result = await self.db.execute(
            select(func.count()).select_from(lesson_ids.subquery())
        )
        total = total_result.scalar() or 0

        completed_result = await self.db.execute(
            select(func.count(Progress.id)).where(
                Progress.user_id == user_id,
                Progress.course_id == course_id,
                Progress.lesson_id.in_(lesson_ids),
            )
        )
        completed = completed_result.scalar() or 0

        return {
            "course_id": course_id,
            "completed": completed,
            "total": total,
            "percent": percent_of(completed, total),
        }

    async def course_stats(self) -> list[dict]:
        """Per course: distinct learners and completion rows."""
        result = await self.db.execute(
            select(
                Course.id,
                Course.title,
                func.count(distinct(Progress.user_id)),
                func.count(Progress.id),
            )
            .outerjoin(Progress, Progress.course_id == Course.id)
            .where(Course.deleted_at.is_(None))
            .group_by(Course.id, Course.title)
            .order_by(Course.id)
        )
        return [
            {
                "course_id": course_id,
                "title": title,
                "unique_users": unique_users,
                "completions": completions,
            }
            for course_id, title, unique_users, completions in result.all()
        ]
