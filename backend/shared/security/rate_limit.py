"""
Rate limiting using slowapi, keyed by client IP.
Protects the public ordering and login endpoints from abuse.

Usage in a router (the endpoint must accept `request: Request`):
    from shared.security.rate_limit import limiter

    @router.post("/login")
    @limiter.limit(LOGIN_LIMIT)
    def login(request: Request, ...):
        ...
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.settings import settings
from shared.config.logging import get_logger

logger = get_logger(__name__)

# Common limits
LOGIN_LIMIT = "5/minute"
SIGNUP_LIMIT = "5/minute"
ORDER_PLACEMENT_LIMIT = "10/minute"
PUBLIC_READ_LIMIT = "100/minute"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.
    Returns a JSON response with retry information.
    """
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many requests. Please try again later.",
            "retry_after": exc.detail,
        },
        headers={"Retry-After": "60"},
    )
