"""Course progress API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import get_current_user, require_admin
from reimaji.database import get_session
from reimaji.db.models import User
from reimaji.lms.course_service import CourseService
from reimaji.lms.progress_service import ProgressService
from reimaji.lms.schemas import CourseProgressResponse, CourseStatsEntry, LessonCompleteResponse
from reimaji.redis_client import get_redis_optional

router = APIRouter(prefix="/api/v1", tags=["Progress"])


@router.post(
    "/courses/{course_id}/lessons/{lesson_id}/complete",
    response_model=LessonCompleteResponse,
)
async def complete_lesson(
    course_id: int,
    lesson_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """Mark a lesson as complete. Completing a course awards its badge."""
    svc = ProgressService(db, redis=get_redis_optional())
    try:
        result = await svc.mark_lesson_complete(user.id, course_id, lesson_id)
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return result


@router.get("/courses/{course_id}/progress", response_model=CourseProgressResponse)
async def get_progress(
    course_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict:
    if await CourseService(db).get_course(course_id) is None:
        raise HTTPException(404, "Course not found")
    return await ProgressService(db).get_course_progress(user.id, course_id)


@router.get("/lms/admin/stats", response_model=list[CourseStatsEntry])
async def get_course_stats(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> list[dict]:
    """Learners and completions per course."""
    return await ProgressService(db).course_stats()
