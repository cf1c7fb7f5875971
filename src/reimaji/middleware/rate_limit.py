"""Redis-backed fixed window rate limiting middleware."""

import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from reimaji.middleware.request_id import client_ip
from reimaji.redis_client import get_redis_optional

# Probes are never limited; CORS preflights are skipped in dispatch
_EXEMPT_PATHS = frozenset({"/health", "/ready"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limit requests per client IP using Redis counters."""

    def __init__(self, app: Any, requests_per_window: int = 100, window_seconds: int = 60) -> None:  # noqa: ANN401
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Count the request in the current window, return 429 when over the limit."""
        redis = get_redis_optional()
        if redis is None or request.method == "OPTIONS" or request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        window = int(time.time()) // self.window_seconds
        rate_key = f"ratelimit:{client_ip(request)}:{window}"

        pipe = redis.pipeline()
        pipe.incr(rate_key)
        pipe.expire(rate_key, self.window_seconds + 1)
        results: list[Any] = await pipe.execute()

        current_count: int = results[0]
        remaining = max(0, self.requests_per_window - current_count)

        if current_count > self.requests_per_window:
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Limit": str(self.requests_per_window),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_window)
        return response
