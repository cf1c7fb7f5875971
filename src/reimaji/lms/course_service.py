"""Course catalogue: courses, their modules and lessons."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.content.sanitize import sanitize_html
from reimaji.content.slugs import slugify
from reimaji.db.base import utcnow
from reimaji.db.models import Course, CourseModule, Lesson, User

logger = logging.getLogger(__name__)


def _apply_publish(row: Course | Lesson, published: bool) -> None:
    row.is_published = published
    row.published_at = utcnow() if published else None


class CourseService:
    """CRUD over the course → module → lesson tree. Deletes are soft."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # --- Courses ---

    async def list_courses(self, include_drafts: bool = False) -> list[Course]:
        """Non-deleted courses, newest first. Published only unless `include_drafts`."""
        query = select(Course).where(Course.deleted_at.is_(None))
        if not include_drafts:
            query = query.where(Course.is_published.is_(True))
        result = await self.db.execute(query.order_by(Course.created_at.desc(), Course.id.desc()))
        return list(result.scalars().all())

    async def get_course(self, course_id: int) -> Course | None:
        course = await self.db.get(Course, course_id)
        if course is None or course.deleted_at is not None:
            return None
        return course

    async def get_course_by_slug(self, slug: str) -> Course | None:
        result = await self.db.execute(
            select(Course).where(Course.slug == slug, Course.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def create_course(self, author: User, data: dict[str, Any]) -> Course:
        """
        Create a course. The slug defaults to the slugified title.

        Raises:
            ValueError: If the slug is already taken, including by a deleted course.
        """
        fields = dict(data)
        slug = fields.pop("slug", None) or slugify(fields["title"])
        taken = await self.db.execute(select(Course.id).where(Course.slug == slug))
        if taken.scalar_one_or_none() is not None:
            msg = "Slug already exists"
            raise ValueError(msg)

        published = bool(fields.pop("is_published", False))
        course = Course(**fields, slug=slug, created_by=author.id)
        _apply_publish(course, published)
        self.db.add(course)
        await self.db.flush()
        logger.info("Course created: id=%s slug=%s", course.id, slug)
        return course

    async def update_course(self, course_id: int, changes: dict[str, Any]) -> Course:
        course = await self.get_course(course_id)
        if course is None:
            msg = "Course not found"
            raise ValueError(msg)
        fields = dict(changes)
        if "is_published" in fields:
            _apply_publish(course, bool(fields.pop("is_published")))
        for name, value in fields.items():
            setattr(course, name, value)
        course.updated_at = utcnow()
        await self.db.flush()
        return course

    async def remove_course(self, course_id: int) -> Course:
        course = await self.get_course(course_id)
        if course is None:
            msg = "Course not found"
            raise ValueError(msg)
        course.deleted_at = utcnow()
        _apply_publish(course, False)
        await self.db.flush()
        return course

    # --- Modules ---

    async def list_modules(self, course_id: int) -> list[CourseModule]:
        result = await self.db.execute(
            select(CourseModule)
            .where(CourseModule.course_id == course_id, CourseModule.deleted_at.is_(None))
            .order_by(CourseModule.order, CourseModule.id)
        )
        return list(result.scalars().all())

    async def get_module(self, module_id: int) -> CourseModule | None:
        module = await self.db.get(CourseModule, module_id)
        if module is None or module.deleted_at is not None:
            return None
        return module

    async def create_module(self, course_id: int, data: dict[str, Any]) -> CourseModule:
        if await self.get_course(course_id) is None:
            msg = "Course not found"
            raise ValueError(msg)
        module = CourseModule(course_id=course_id, **data)
        self.db.add(module)
        await self.db.flush()
        return module

    async def update_module(self, module_id: int, changes: dict[str, Any]) -> CourseModule:
        module = await self.get_module(module_id)
        if module is None:
            msg = "Module not found"
            raise ValueError(msg)
        for name, value in changes.items():
            setattr(module, name, value)
        module.updated_at = utcnow()
        await self.db.flush()
        return module

    async def remove_module(self, module_id: int) -> CourseModule:
        module = await self.get_module(module_id)
        if module is None:
            msg = "Module not found"
            raise ValueError(msg)
        module.deleted_at = utcnow()
        await self.db.flush()
        return module

    # --- Lessons ---

    async def list_lessons(self, module_id: int, include_drafts: bool = False) -> list[Lesson]:
        """Non-deleted lessons of a module by ascending order."""
        query = select(Lesson).where(Lesson.module_id == module_id, Lesson.deleted_at.is_(None))
        if not include_drafts:
            query = query.where(Lesson.is_published.is_(True))
        result = await self.db.execute(query.order_by(Lesson.order, Lesson.id))
        return list(result.scalars().all())

    async def get_lesson(self, lesson_id: int) -> Lesson | None:
        lesson = await self.db.get(Lesson, lesson_id)
        if lesson is None or lesson.deleted_at is not None:
            return None
        return lesson

    async def course_id_for_lesson(self, lesson: Lesson) -> int | None:
        """Owning course of a lesson, or None when its module is gone."""
        module = await self.get_module(lesson.module_id)
        return module.course_id if module is not None else None

    async def create_lesson(self, module_id: int, data: dict[str, Any]) -> Lesson:
        if await self.get_module(module_id) is None:
            msg = "Module not found"
            raise ValueError(msg)
        fields = dict(data)
        fields["content"] = sanitize_html(fields["content"])
        published = bool(fields.pop("is_published", False))
        lesson = Lesson(module_id=module_id, **fields)
        _apply_publish(lesson, published)
        self.db.add(lesson)
        await self.db.flush()
        return lesson

    async def update_lesson(self, lesson_id: int, changes: dict[str, Any]) -> Lesson:
        lesson = await self.get_lesson(lesson_id)
        if lesson is None:
            msg = "Lesson not found"
            raise ValueError(msg)
        fields = dict(changes)
        if fields.get("content") is not None:
            fields["content"] = sanitize_html(fields["content"])
        if "is_published" in fields:
            _apply_publish(lesson, bool(fields.pop("is_published")))
        for name, value in fields.items():
            setattr(lesson, name, value)
        lesson.updated_at = utcnow()
        await self.db.flush()
        return lesson

    async def remove_lesson(self, lesson_id: int) -> Lesson:
        lesson = await self.get_lesson(lesson_id)
        if lesson is None:
            msg = "Lesson not found"
            raise ValueError(msg)
        lesson.deleted_at = utcnow()
        _apply_publish(lesson, False)
        await self.db.flush()
        return lesson
