"""Request ID middleware: generates or propagates X-Request-Id."""

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Client-supplied ids end up in logs; anything else is replaced
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._\-]{1,128}$")


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind the proxy, else the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and bind it into the structlog context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get("X-Request-Id", "")
        request_id = incoming if _VALID_REQUEST_ID.match(incoming) else str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
            client_ip=client_ip(request),
        )
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response
