"""Request/response models for user endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RoleLiteral = Literal["guest", "free", "pro", "admin", "superadmin"]


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    clerk_user_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: RoleLiteral
    created_at: datetime
    updated_at: datetime


class SyncRequest(BaseModel):
    """Profile fields forwarded by the web app after sign-in."""

    email: str | None = Field(default=None, max_length=320)
    first_name: str | None = Field(default=None, max_length=128)
    last_name: str | None = Field(default=None, max_length=128)


class SyncResponse(BaseModel):
    user: UserResponse
    created: bool


class UserCreateRequest(BaseModel):
    clerk_user_id: str = Field(min_length=1, max_length=128)
    email: str | None = Field(default=None, max_length=320)
    first_name: str | None = Field(default=None, max_length=128)
    last_name: str | None = Field(default=None, max_length=128)
    role: RoleLiteral = "free"


class RoleUpdateRequest(BaseModel):
    role: RoleLiteral


class RoleStatsResponse(BaseModel):
    total: int
    counts: dict[str, int]
