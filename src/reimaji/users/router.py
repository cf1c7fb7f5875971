"""User management router: all /api/v1/users/* endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import get_current_user, get_identity, require_admin
from reimaji.auth.service import get_user_by_clerk_id, upsert_from_identity
from reimaji.database import get_session
from reimaji.db.models import User
from reimaji.users.schemas import (
    RoleStatsResponse,
    RoleUpdateRequest,
    SyncRequest,
    SyncResponse,
    UserCreateRequest,
    UserResponse,
)
from reimaji.users.service import create_user, delete_account, list_users, role_stats, update_role

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


# ---------------------------------------------------------------------------
# Self
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> User:
    """Get own profile."""
    return user


@router.post("/sync", response_model=SyncResponse)
async def sync_me(
    body: SyncRequest,
    claims: dict[str, Any] = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
) -> SyncResponse:
    """Create or refresh the local user for the signed-in identity."""
    user, created = await upsert_from_identity(
        db,
        claims["sub"],
        email=body.email or claims.get("email"),
        first_name=body.first_name,
        last_name=body.last_name,
    )
    await db.commit()
    return SyncResponse(user=UserResponse.model_validate(user), created=created)


@router.delete("/me", response_model=UserResponse)
async def delete_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Soft-delete own account."""
    user = await delete_account(db, user)
    await db.commit()
    return user


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


@router.get("", response_model=list[UserResponse])
async def list_all_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> list[User]:
    """List every user."""
    return await list_users(db)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user_endpoint(
    body: UserCreateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Create a user with an explicit role."""
    try:
        user = await create_user(
            db,
            body.clerk_user_id,
            body.role,
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    await db.commit()
    return user


@router.get("/stats/roles", response_model=RoleStatsResponse)
async def get_role_stats(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, object]:
    """User counts per role."""
    return await role_stats(db)


@router.get("/by-clerk-id/{clerk_user_id}", response_model=UserResponse)
async def get_by_clerk_id(
    clerk_user_id: str,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Look up a user by identity-provider subject."""
    user = await get_user_by_clerk_id(db, clerk_user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int,
    body: RoleUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Change another user's role."""
    try:
        user = await update_role(db, user_id, body.role)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    await db.commit()
    logger.info("role_change_by_admin", admin_id=admin.id, target_user_id=user_id, role=body.role)
    return user
