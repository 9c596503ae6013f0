"""
Rate limiting configuration and setup.

Uses slowapi with a moving (sliding) window per client. The counter
storage is configurable: in-process memory for a single instance,
Redis when several instances must share limits.

Authenticated requests are keyed by user; the public auth routes by
client IP.
"""

import math

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from tradejournal.core.config import settings

DEFAULT_RETRY_AFTER_SECONDS = 60


def get_client_ip(request: Request) -> str:
    """Return the originating client IP, honouring proxy headers."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "anonymous"


def rate_limit_key(request: Request) -> str:
    """Build the rate limit identifier for a request.

    The current-user dependency stores the authenticated user id on
    ``request.state``; it runs before the limit is checked. A request to a
    protected route without a valid token is rejected with 401 by that
    dependency and never reaches the limiter, so the ``ip:`` key only
    applies to the routes without it: sign-up and sign-in.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_client_ip(request)}"


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[settings.rate_limit_standard],
    storage_uri=settings.rate_limit_storage_uri,
    strategy="moving-window",
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Handle rate limit exceeded errors with a clean JSON response.

    Args:
        _request: The incoming HTTP request.
        exc: The rate limit exceeded exception.

    Returns:
        A 429 JSON response telling the client when to retry.
    """
    retry_after = DEFAULT_RETRY_AFTER_SECONDS
    limit = getattr(exc, "limit", None)
    if limit is not None:
        retry_after = math.ceil(limit.limit.get_expiry())
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Please try again later.",
            "retryAfter": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )
