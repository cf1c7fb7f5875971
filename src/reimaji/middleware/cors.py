"""CORS middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reimaji.config import Settings


def allowed_origins(settings: Settings) -> list[str]:
    """Configured origins plus the public frontend, without duplicates."""
    origins = [*settings.cors_origins, settings.frontend_base_url.rstrip("/")]
    return list(dict.fromkeys(o for o in origins if o))


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the web frontend and its preview deployments."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(settings),
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
