"""
Rate Limiting for the Driving School API
========================================
Implements rate limiting using slowapi (fixed window, keyed by client IP).

- Every route: RATE_LIMIT_DEFAULT (200 per 15 minutes), applied by SlowAPIMiddleware
- /auth/login: RATE_LIMIT_LOGIN (5 per 15 minutes, brute force protection)
- /auth/forgot-password, /auth/reset-password: RATE_LIMIT_PASSWORD_RESET

Counters live in RATE_LIMIT_STORAGE_URI ("memory://" by default, a
redis:// URI shares them between workers).
"""

import math
import time

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from driving_school.core.config import settings
from driving_school.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Rate limit key: the client IP address"""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def get_retry_after(request: Request, exc: RateLimitExceeded) -> int:
    """Seconds until the exhausted window resets"""
    current = getattr(request.state, "view_rate_limit", None)
    if current is not None:
        item, identifiers = current
        stats = limiter.limiter.get_window_stats(item, *identifiers)
        return max(1, math.ceil(stats.reset_time - time.time()))
    return exc.limit.limit.get_expiry()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Handler for rate limit exceeded errors.

    Kept synchronous: SlowAPIMiddleware calls the registered handler
    without awaiting it.
    """
    retry_after = get_retry_after(request, exc)

    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)} on {request.url.path}: {exc.detail}",
        extra={"event_type": "rate_limited", "retry_after": retry_after},
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests, please try again later",
            "retry_after": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )


def login_rate_limit():
    """Brute force protection for the login endpoint"""
    return limiter.limit(settings.RATE_LIMIT_LOGIN)


def password_reset_rate_limit():
    """Limit for forgot/reset password requests"""
    return limiter.limit(settings.RATE_LIMIT_PASSWORD_RESET)
