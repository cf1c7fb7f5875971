"""LMS catalogue API: courses, modules, lessons and quizzes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import get_current_user, get_current_user_optional, require_admin
from reimaji.auth.roles import is_admin
from reimaji.database import get_session
from reimaji.db.models import Course, CourseModule, Lesson, Quiz, User
from reimaji.lms.course_service import CourseService
from reimaji.lms.quiz_service import QuizService
from reimaji.lms.schemas import (
    CourseCreateRequest,
    CourseResponse,
    CourseUpdateRequest,
    LessonCreateRequest,
    LessonResponse,
    LessonSummary,
    LessonUpdateRequest,
    ModuleCreateRequest,
    ModuleResponse,
    ModuleUpdateRequest,
    QuizCreateRequest,
    QuizQuestion,
    QuizResultResponse,
    QuizSubmitRequest,
)
from reimaji.redis_client import get_redis_optional

router = APIRouter(prefix="/api/v1", tags=["LMS"])


def _viewer_is_admin(user: User | None) -> bool:
    return user is not None and is_admin(user.role)


async def _visible_course(svc: CourseService, course_id: int, viewer: User | None) -> Course:
    """A live course; drafts only for admins. 404 otherwise."""
    course = await svc.get_course(course_id)
    if course is None or (not course.is_published and not _viewer_is_admin(viewer)):
        raise HTTPException(404, "Course not found")
    return course


async def _visible_lesson(svc: CourseService, lesson_id: int, viewer: User | None) -> Lesson:
    """A live lesson under a live module and course; drafts only for admins. 404 otherwise."""
    admin = _viewer_is_admin(viewer)
    lesson = await svc.get_lesson(lesson_id)
    if lesson is None or (not lesson.is_published and not admin):
        raise HTTPException(404, "Lesson not found")
    course_id = await svc.course_id_for_lesson(lesson)
    course = await svc.get_course(course_id) if course_id is not None else None
    if course is None or (not course.is_published and not admin):
        raise HTTPException(404, "Lesson not found")
    return lesson


# ---- Courses ----


@router.get("/courses", response_model=list[CourseResponse])
async def list_courses(db: AsyncSession = Depends(get_session)) -> list[Course]:
    """Published courses, newest first."""
    return await CourseService(db).list_courses()


@router.get("/lms/admin/courses", response_model=list[CourseResponse])
async def list_all_courses(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> list[Course]:
    """Every non-deleted course including drafts."""
    return await CourseService(db).list_courses(include_drafts=True)


@router.get("/courses/{slug}", response_model=CourseResponse)
async def get_course(
    slug: str,
    viewer: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Course:
    course = await CourseService(db).get_course_by_slug(slug)
    if course is None or (not course.is_published and not _viewer_is_admin(viewer)):
        raise HTTPException(404, "Course not found")
    return course


@router.post("/courses", response_model=CourseResponse, status_code=201)
async def create_course(
    body: CourseCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Course:
    try:
        course = await CourseService(db).create_course(admin, body.model_dump())
    except ValueError as e:
        raise HTTPException(409, str(e)) from e
    await db.commit()
    return course


@router.patch("/courses/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: int,
    body: CourseUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Course:
    try:
        course = await CourseService(db).update_course(
            course_id, body.model_dump(exclude_unset=True, exclude_none=True)
        )
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return course


@router.delete("/courses/{course_id}", response_model=CourseResponse)
async def remove_course(
    course_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Course:
    try:
        course = await CourseService(db).remove_course(course_id)
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return course


# ---- Modules ----


@router.get("/courses/{course_id}/modules", response_model=list[ModuleResponse])
async def list_modules(
    course_id: int,
    viewer: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> list[CourseModule]:
    """Modules of a visible course by ascending order."""
    svc = CourseService(db)
    await _visible_course(svc, course_id, viewer)
    return await svc.list_modules(course_id)


@router.post("/courses/{course_id}/modules", response_model=ModuleResponse, status_code=201)
async def create_module(
    course_id: int,
    body: ModuleCreateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> CourseModule:
    try:
        module = await CourseService(db).create_module(course_id, body.model_dump())
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return module


@router.patch("/modules/{module_id}", response_model=ModuleResponse)
async def update_module(
    module_id: int,
    body: ModuleUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> CourseModule:
    try:
        module = await CourseService(db).update_module(
            module_id, body.model_dump(exclude_unset=True, exclude_none=True)
        )
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return module


@router.delete("/modules/{module_id}", response_model=ModuleResponse)
async def remove_module(
    module_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> CourseModule:
    try:
        module = await CourseService(db).remove_module(module_id)
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return module


# ---- Lessons ----


@router.get("/modules/{module_id}/lessons", response_model=list[LessonSummary])
async def list_lessons(
    module_id: int,
    viewer: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> list[Lesson]:
    """Published lessons of a module in a visible course; admins also see drafts."""
    svc = CourseService(db)
    module = await svc.get_module(module_id)
    if module is None:
        raise HTTPException(404, "Module not found")
    await _visible_course(svc, module.course_id, viewer)
    return await svc.list_lessons(module_id, include_drafts=_viewer_is_admin(viewer))


@router.post("/modules/{module_id}/lessons", response_model=LessonResponse, status_code=201)
async def create_lesson(
    module_id: int,
    body: LessonCreateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Lesson:
    try:
        lesson = await CourseService(db).create_lesson(module_id, body.model_dump())
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return lesson


@router.get("/lessons/{lesson_id}", response_model=LessonResponse)
async def get_lesson(
    lesson_id: int,
    viewer: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Lesson:
    return await _visible_lesson(CourseService(db), lesson_id, viewer)


@router.patch("/lessons/{lesson_id}", response_model=LessonResponse)
async def update_lesson(
    lesson_id: int,
    body: LessonUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Lesson:
    try:
        lesson = await CourseService(db).update_lesson(
            lesson_id, body.model_dump(exclude_unset=True, exclude_none=True)
        )
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return lesson


@router.delete("/lessons/{lesson_id}", response_model=LessonResponse)
async def remove_lesson(
    lesson_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Lesson:
    try:
        lesson = await CourseService(db).remove_lesson(lesson_id)
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return lesson


# ---- Quizzes ----


@router.get(
    "/lessons/{lesson_id}/quizzes",
    response_model=list[QuizQuestion],
    response_model_exclude_none=True,
)
async def list_quizzes(
    lesson_id: int,
    viewer: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> list[QuizQuestion]:
    """Quiz questions of a lesson. Only admins see the answer key and drafts."""
    admin = _viewer_is_admin(viewer)
    await _visible_lesson(CourseService(db), lesson_id, viewer)
    questions = await QuizService(db).list_by_lesson(lesson_id, include_drafts=admin)
    if admin:
        return [QuizQuestion.model_validate(q) for q in questions]
    return [QuizQuestion.for_learner(q) for q in questions]


@router.post("/lessons/{lesson_id}/quizzes", response_model=QuizQuestion, status_code=201)
async def create_quiz(
    lesson_id: int,
    body: QuizCreateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Quiz:
    try:
        quiz = await QuizService(db).create(lesson_id, body.model_dump())
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return quiz


@router.post("/lessons/{lesson_id}/quizzes/submit", response_model=QuizResultResponse)
async def submit_quiz(
    lesson_id: int,
    body: QuizSubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """Score answers; a passing score completes the lesson."""
    try:
        result = await QuizService(db, redis=get_redis_optional()).submit(
            user.id, lesson_id, body.answers
        )
    except ValueError as e:
        raise HTTPException(404, str(e)) from e
    await db.commit()
    return result
