"""FastAPI authentication and authorization dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.jwt import verify_token
from reimaji.auth.roles import ADMIN_ROLES
from reimaji.auth.service import get_user_by_clerk_id
from reimaji.database import get_session
from reimaji.db.models import User

_bearer = HTTPBearer()
_bearer_optional = HTTPBearer(auto_error=False)


async def get_identity(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
) -> dict[str, Any]:
    """Verify the bearer token and return its claims. Raises 401 on failure."""
    try:
        return verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e


async def get_current_user(
    claims: dict[str, Any] = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Resolve the token subject to a local user.

    Raises 401 when no user is synced for the subject, 403 for deleted accounts.
    """
    user = await get_user_by_clerk_id(db, claims["sub"])
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    if user.deleted_at is not None:
        raise HTTPException(status_code=403, detail="Account is deleted")
    return user


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_optional),
    db: AsyncSession = Depends(get_session),
) -> User | None:
    """Extract user from JWT if present, return None otherwise."""
    if credentials is None:
        return None
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError:
        return None
    user = await get_user_by_clerk_id(db, payload["sub"])
    if user is None or user.deleted_at is not None:
        return None
    return user


def require_role(*roles: str) -> Callable[..., Awaitable[User]]:
    """Build a dependency that only lets users with one of `roles` through."""
    allowed = frozenset(roles)

    async def _checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Forbidden: insufficient role")
        return user

    return _checker


require_admin = require_role(*ADMIN_ROLES)
