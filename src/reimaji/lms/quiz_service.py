"""Lesson quizzes: authoring, listing and scoring."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.config import get_settings
from reimaji.db.models import Quiz
from reimaji.lms.course_service import CourseService
from reimaji.lms.progress_service import ProgressService, percent_of

logger = logging.getLogger(__name__)


def score_answers(questions: list[Quiz], answers: list[int | None]) -> tuple[int, int, list[dict]]:
    """Compare answers positionally with the answer key.

    Missing answers count as wrong. Returns (score, correct_count, feedback).
    """
    feedback = []
    correct_count = 0
    for index, quiz in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        correct = answer is not None and answer == quiz.correct_index
        correct_count += int(correct)
        feedback.append({"index": index, "correct": correct, "explanation": quiz.explanation})
    return percent_of(correct_count, len(questions)), correct_count, feedback


class QuizService:
    def __init__(self, db: AsyncSession, redis: object | None = None) -> None:
        self.db = db
        self.redis = redis

    async def list_by_lesson(self, lesson_id: int, include_drafts: bool = False) -> list[Quiz]:
        """Questions of a lesson in creation order."""
        query = select(Quiz).where(Quiz.lesson_id == lesson_id)
        if not include_drafts:
            query = query.where(Quiz.is_published.is_(True))
        result = await self.db.execute(query.order_by(Quiz.created_at, Quiz.id))
        return list(result.scalars().all())

    async def create(self, lesson_id: int, data: dict[str, Any]) -> Quiz:
        if await CourseService(self.db).get_lesson(lesson_id) is None:
            msg = "Lesson not found"
            raise ValueError(msg)
        quiz = Quiz(lesson_id=lesson_id, **data)
        self.db.add(quiz)
        await self.db.flush()
        return quiz

    async def submit(self, user_id: int, lesson_id: int, answers: list[int | None]) -> dict:
        """
        Score a submission against the lesson's published questions.

        A passing score records the lesson as complete, which may complete the
        course and award its badge.

        Raises:
            ValueError: If the lesson or its course is missing, removed or a draft.
        """
        courses = CourseService(self.db)
        lesson = await courses.get_lesson(lesson_id)
        course_id = await courses.course_id_for_lesson(lesson) if lesson is not None else None
        course = await courses.get_course(course_id) if course_id is not None else None
        if course is None or not course.is_published or not lesson.is_published:
            msg = "Lesson not found"
            raise ValueError(msg)

        questions = await self.list_by_lesson(lesson_id)
        score, correct, feedback = score_answers(questions, answers)
        passed = bool(questions) and score >= get_settings().quiz_pass_score

        progress_recorded = False
        if passed:
            outcome = await ProgressService(self.db, self.redis).mark_lesson_complete(
                user_id, course_id, lesson_id
            )
            progress_recorded = not outcome["already_completed"]

        logger.info("Quiz submitted: user=%s lesson=%s score=%s", user_id, lesson_id, score)
        return {
            "score": score,
            "correct": correct,
            "total": len(questions),
            "passed": passed,
            "feedback": feedback,
            "progress_recorded": progress_recorded,
        }
