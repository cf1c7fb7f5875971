"""Pydantic models for analytics endpoints."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ConversionType = Literal[
    "signup",
    "subscription_start",
    "subscription_cancel",
    "course_start",
    "course_complete",
    "content_upgrade",
]


class PageViewRequest(BaseModel):
    path: str = Field(min_length=1, max_length=2048)
    load_time: float | None = Field(default=None, ge=0)
    referrer: str | None = Field(default=None, max_length=2048)
    user_agent: str | None = Field(default=None, max_length=1024)


class ActionRequest(BaseModel):
    action: str = Field(min_length=1, max_length=64)
    metadata: dict[str, Any] | None = None


class ConversionRequest(BaseModel):
    conversion_type: ConversionType
    value: float | None = None
    metadata: dict[str, Any] | None = None


class TrackResponse(BaseModel):
    recorded: bool


class KPIResponse(BaseModel):
    total_users: int
    new_users_last_30_days: int
    total_course_completions: int
    total_subscriptions: int
