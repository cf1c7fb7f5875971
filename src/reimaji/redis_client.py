"""Optional Redis connection used for rate limiting and badge events.

An empty ``REIMAJI_REDIS_URL`` disables Redis; callers use
``get_redis_optional()`` and skip their Redis work when it returns None.
"""

import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)

_pool: redis.Redis | None = None


async def init_redis(url: str | None) -> None:
    """Connect to Redis, or leave it disabled when no URL is configured."""
    global _pool  # noqa: PLW0603
    if not url:
        logger.info("Redis disabled: no URL configured")
        return
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis_optional() -> redis.Redis | None:
    return _pool


async def redis_status() -> str:
    """'ok', 'disabled' or 'error: ...' for the readiness probe."""
    if _pool is None:
        return "disabled"
    try:
        await _pool.ping()
    except Exception as exc:  # noqa: BLE001
        return f"error: {exc}"
    return "ok"
