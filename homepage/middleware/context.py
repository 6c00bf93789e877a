"""
Request context middleware.

Gives every request an id, binds it into structlog's context vars so each
log line emitted while handling the request carries it, and echoes it back
in the X-Request-ID response header. Requests slower than the configured
threshold are logged as warnings.
"""

import re
import time
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from homepage.core.context import clear_context, generate_request_id, set_request_id

logger = structlog.get_logger(__name__)

# Client-supplied ids end up in log lines
MAX_ID_LENGTH = 64
SAFE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_\-]+$")


def _validate_id(value: Optional[str]) -> Optional[str]:
    """Return the id if it is short and log-safe, else None."""
    if not value:
        return None
    if len(value) > MAX_ID_LENGTH:
        return None
    if not SAFE_ID_PATTERN.match(value):
        return None
    return value


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, slow_request_threshold_ms: float = 500.0):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _validate_id(request.headers.get("X-Request-ID")) or generate_request_id()
        set_request_id(request_id)
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            if duration_ms >= self.slow_request_threshold_ms:
                logger.warning(
                    "Slow request",
                    duration_ms=round(duration_ms, 1),
                    status_code=status_code,
                )
            clear_context()
            structlog.contextvars.clear_contextvars()


__all__ = ["RequestContextMiddleware"]
