"""
Rate Limiting for the UniRecords API
====================================
slowapi limiter, backed by Redis when REDIS_URL is configured and by
in-process memory otherwise.

- Default: RATE_LIMIT_PER_MINUTE per client
- /auth/login: 5 req/min (brute force protection)
- /auth/forgot-password: 3 req/min
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from unirecords.core.config import settings
from unirecords.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Rate limit key: authenticated user id when known, otherwise client IP.
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


def get_storage_uri() -> str:
    """Redis when configured, else in-memory counters"""
    return settings.REDIS_URL or "memory://"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=get_storage_uri(),
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Return the standard error envelope with a Retry-After header"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "status": "error",
            "message": "Too many requests. Please slow down.",
            "code": "RATE_LIMITED",
            "details": {"limit": str(exc.detail)},
        },
        headers={
            "Retry-After": "60",
            "X-RateLimit-Limit": str(settings.RATE_LIMIT_PER_MINUTE),
        }
    )


def auth_rate_limit():
    """Rate limit for login (5/min)"""
    return limiter.limit("5/minute", key_func=get_user_identifier)


def password_reset_rate_limit():
    """Rate limit for password reset requests (3/min)"""
    return limiter.limit("3/minute", key_func=get_user_identifier)
