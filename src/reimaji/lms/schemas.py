"""Pydantic models for course, module, lesson, quiz and progress endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- Course ---


class CourseCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    slug: str | None = Field(default=None, max_length=320, pattern=r"^[a-z0-9-]+$")
    description: str
    image_url: str | None = None
    tags: list[str] = []
    is_published: bool = False


class CourseUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    image_url: str | None = None
    tags: list[str] | None = None
    is_published: bool | None = None


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    description: str
    image_url: str | None = None
    tags: list[str]
    is_published: bool
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


# --- Module ---


class ModuleCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    order: int = Field(ge=0)
    description: str | None = None


class ModuleUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    order: int | None = Field(default=None, ge=0)
    description: str | None = None


class ModuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    title: str
    order: int
    description: str | None = None


# --- Lesson ---


class LessonCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    order: int = Field(ge=0)
    content: str
    video_url: str | None = None
    is_published: bool = False


class LessonUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    order: int | None = Field(default=None, ge=0)
    content: str | None = None
    video_url: str | None = None
    is_published: bool | None = None


class LessonSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: int
    title: str
    order: int
    is_published: bool


class LessonResponse(LessonSummary):
    content: str
    video_url: str | None = None
    published_at: datetime | None = None


# --- Quiz ---


class QuizCreateRequest(BaseModel):
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=2, max_length=10)
    correct_index: int = Field(ge=0)
    explanation: str | None = None
    is_published: bool = True

    @model_validator(mode="after")
    def _correct_index_in_range(self) -> QuizCreateRequest:
        if self.correct_index >= len(self.options):
            msg = "correct_index must point at one of the options"
            raise ValueError(msg)
        return self


class QuizQuestion(BaseModel):
    """A question. The answer key fields stay unset in the learner view."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    lesson_id: int
    question: str
    options: list[str]
    correct_index: int | None = None
    explanation: str | None = None
    is_published: bool | None = None

    @classmethod
    def for_learner(cls, quiz: object) -> QuizQuestion:
        return cls.model_validate(quiz).model_copy(
            update={"correct_index": None, "explanation": None, "is_published": None}
        )


class QuizSubmitRequest(BaseModel):
    answers: list[int | None] = Field(max_length=200)


class QuestionFeedback(BaseModel):
    index: int
    correct: bool
    explanation: str | None = None


class QuizResultResponse(BaseModel):
    score: int
    correct: int
    total: int
    passed: bool
    feedback: list[QuestionFeedback]
    progress_recorded: bool


# --- Progress ---


class CourseProgressResponse(BaseModel):
    course_id: int
    completed: int
    total: int
    percent: int


class LessonCompleteResponse(BaseModel):
    lesson_id: int
    already_completed: bool
    course_completed: bool
    badge_earned: str | None = None
    progress: CourseProgressResponse


class CourseStatsEntry(BaseModel):
    course_id: int
    title: str
    unique_users: int
    completions: int
