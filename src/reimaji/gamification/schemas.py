"""Pydantic models for badge endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    title: str
    description: str


class EarnedBadgeResponse(BaseModel):
    key: str
    title: str
    description: str
    earned_at: datetime


class AwardRequest(BaseModel):
    key: str = Field(min_length=1, max_length=64, pattern=r"^[a-z0-9_]+$")
    title: str | None = Field(default=None, max_length=128)
    description: str | None = None


class AwardResponse(BaseModel):
    key: str
    awarded: bool
