"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

# Shared-secret tokens in tests; must be set before settings are first read
os.environ["REIMAJI_JWT_ALGORITHM"] = "HS256"
os.environ["REIMAJI_JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["REIMAJI_LOG_FORMAT"] = "console"
os.environ.pop("REIMAJI_ROLE_OVERRIDES", None)

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from reimaji.auth.jwt import create_access_token, reset_keys  # noqa: E402
from reimaji.config import get_settings  # noqa: E402
from reimaji.database import close_db, get_engine, get_session, init_db  # noqa: E402
from reimaji.db.base import Base  # noqa: E402
from reimaji.db.models import User  # noqa: E402

get_settings.cache_clear()
reset_keys()


async def create_user(
    db: AsyncSession,
    clerk_user_id: str,
    role: str = "free",
    email: str | None = None,
) -> User:
    """Insert a user directly and commit."""
    user = User(clerk_user_id=clerk_user_id, role=role, email=email or f"{clerk_user_id}@example.com")
    db.add(user)
    await db.commit()
    return user


def bearer(clerk_user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(clerk_user_id)}"}


@pytest_asyncio.fixture
async def client(tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against a fresh SQLite database."""
    from reimaji.gamification.seed import seed_badges
    from reimaji.main import create_app

    get_settings.cache_clear()
    reset_keys()
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async for session in get_session():
        await seed_badges(session)
        break

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()


@pytest_asyncio.fixture
async def db_session(client: AsyncClient) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session on the client's database."""
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "user_admin", role="admin")


@pytest_asyncio.fixture
async def free_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "user_free", role="free")


@pytest_asyncio.fixture
async def pro_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "user_pro", role="pro")


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return bearer(admin_user.clerk_user_id)


@pytest_asyncio.fixture
async def free_headers(free_user: User) -> dict[str, str]:
    return bearer(free_user.clerk_user_id)


@pytest_asyncio.fixture
async def pro_headers(pro_user: User) -> dict[str, str]:
    return bearer(pro_user.clerk_user_id)
