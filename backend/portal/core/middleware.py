"""
NITP Student Portal - HTTP Middleware
"""

import time
import uuid
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portal.core.logging_config import logger, set_request_id, set_user_id

# Health checks and docs are not worth a log line per hit
QUIET_PATH_PREFIXES = ("/health", "/api/v1/health", "/docs", "/redoc", "/openapi.json")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id (the caller's X-Request-ID when given) so the
    auth events it produces can be correlated, and log its outcome.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        set_request_id(request_id)
        path = request.url.path
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.error(f"{request.method} {path} - unhandled exception", exc_info=True)
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if not path.startswith(QUIET_PATH_PREFIXES):
            logger.log_http_request(request.method, path, response.status_code, duration_ms)

        set_request_id("")
        set_user_id("")
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Standard hardening headers; responses carry credentials so nothing is cached"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"

        return response
