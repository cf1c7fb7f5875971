"""LMS fixtures: a published course with two modules."""

from __future__ import annotations

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.db.base import utcnow
from reimaji.db.models import Course, CourseModule, Lesson, Quiz, User


async def build_course(db: AsyncSession, author: User, slug: str = "intro-to-ai") -> dict:
    """Course with module 1 (lessons 1, 2) and module 2 (lesson 3), all published."""
    now = utcnow()
    course = Course(
        title="Intro to AI", slug=slug, description="Basics", tags=["ai"],
        is_published=True, published_at=now, created_by=author.id,
    )
    db.add(course)
    await db.flush()

    m1 = CourseModule(course_id=course.id, title="Foundations", order=1)
    m2 = CourseModule(course_id=course.id, title="Practice", order=2)
    db.add_all([m1, m2])
    await db.flush()

    lessons = [
        Lesson(module_id=m1.id, title="What is AI", order=1, content="c1", is_published=True, published_at=now),
        Lesson(module_id=m1.id, title="History", order=2, content="c2", is_published=True, published_at=now),
        Lesson(module_id=m2.id, title="First Model", order=1, content="c3", is_published=True, published_at=now),
    ]
    db.add_all(lessons)
    await db.flush()

    quizzes = [
        Quiz(lesson_id=lessons[0].id, question="Q1", options=["a", "b", "c"], correct_index=0,
             explanation="Because a", is_published=True),
        Quiz(lesson_id=lessons[0].id, question="Q2", options=["a", "b"], correct_index=1,
             is_published=True),
        Quiz(lesson_id=lessons[0].id, question="Draft", options=["a", "b"], correct_index=1,
             is_published=False),
    ]
    db.add_all(quizzes)
    await db.commit()
    return {"course": course, "modules": [m1, m2], "lessons": lessons, "quizzes": quizzes}


@pytest_asyncio.fixture
async def course_tree(db_session: AsyncSession, admin_user: User) -> dict:
    return await build_course(db_session, admin_user)
