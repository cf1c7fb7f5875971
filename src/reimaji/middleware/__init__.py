"""Middleware registration."""

from fastapi import FastAPI
from starlette.middleware.gzip import GZipMiddleware

from reimaji.config import Settings
from reimaji.middleware.cors import setup_cors
from reimaji.middleware.error_handler import setup_error_handlers
from reimaji.middleware.logging import setup_logging
from reimaji.middleware.rate_limit import RateLimitMiddleware
from reimaji.middleware.request_id import RequestIdMiddleware

# Article and lesson bodies are large HTML; small JSON is not worth compressing
GZIP_MINIMUM_SIZE = 1024


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and middleware.

    Starlette runs middleware in reverse-add order. The request id is bound
    before rate limiting so 429s are logged with it, and CORS is added last to
    wrap every response.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MINIMUM_SIZE)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
