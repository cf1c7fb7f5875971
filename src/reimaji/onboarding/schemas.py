"""Pydantic models for onboarding endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

OnboardingStep = Literal["news", "research", "lms"]


class StepUpdateRequest(BaseModel):
    step: OnboardingStep
    completed: bool = True


class OnboardingResponse(BaseModel):
    steps: dict[str, bool]
    completed: bool
    updated_at: datetime
