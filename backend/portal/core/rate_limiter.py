"""
Rate Limiting for the Student Portal API
========================================
Implements rate limiting using slowapi. Storage is in-memory by default;
point RATE_LIMIT_STORAGE_URI at Redis when running more than one worker.

Public endpoints have their own limits:
- /students/register: REGISTER_RATE_LIMIT (3/minute)
- /students/request-password-change: PASSWORD_REQUEST_RATE_LIMIT (5/minute)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from portal.core.config import settings
from portal.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """
    Get rate limit key.

    Authenticated user ID when an upstream dependency set one,
    otherwise the client IP address.
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def register_rate_limit() -> str:
    return settings.REGISTER_RATE_LIMIT


def password_request_rate_limit() -> str:
    return settings.PASSWORD_REQUEST_RATE_LIMIT


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns the portal error payload plus a Retry-After header.
    """
    retry_after = "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMITED",
                "message": "Too many requests. Please slow down.",
                "messages": ["Too many requests. Please slow down."],
                "details": {
                    "limit": str(exc.detail),
                    "retry_after_seconds": int(retry_after),
                },
            },
        },
        headers={"Retry-After": retry_after},
    )
