"""
Rate limiting for the authentication endpoints.

``limiter`` is a slowapi ``Limiter`` keyed by client address with in-memory
storage. Endpoints opt in with ``@limiter.limit(auth_rate_limit)`` placed
under the route decorator; such endpoints must take a ``request: Request``
argument.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from buildboss.core.logging_config import get_security_logger
from buildboss.server.core.config import settings

security_logger = get_security_logger()

DEVELOPMENT_AUTH_LIMIT = "50 per 15 minutes"
PRODUCTION_AUTH_LIMIT = "5 per 15 minutes"

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit.enabled)


def auth_rate_limit() -> str:
    """Limit applied to sign-in and registration, per client address."""
    configured = settings.rate_limit.auth_limit
    if configured:
        return configured
    if settings.environment.lower() == "development":
        return DEVELOPMENT_AUTH_LIMIT
    return PRODUCTION_AUTH_LIMIT


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer a throttled request with 429 in the API's error shape."""
    client = get_remote_address(request)
    security_logger.warning(f"Rate limit exceeded by {client} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many attempts, please try again later",
            "error_type": "RateLimitExceeded",
            "limit": str(exc.detail),
        },
    )
