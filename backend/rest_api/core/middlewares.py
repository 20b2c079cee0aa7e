"""
Response hardening, JSON-only request bodies and the storage error handler.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from shared.config.logging import rest_api_logger as logger
from shared.config.settings import settings

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}
HSTS = "max-age=31536000; includeSubDomains"

JSON_MEDIA_TYPE = "application/json"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = HSTS
        if "server" in response.headers:
            del response.headers["server"]
        return response


class ContentTypeValidationMiddleware(BaseHTTPMiddleware):
    """
    415 for POST/PATCH bodies that are not JSON.

    Requests without a Content-Type pass, so bodyless actions such as
    assign, unassign and activate need no header.
    """

    BODY_METHODS = frozenset({"POST", "PATCH"})

    async def dispatch(self, request: Request, call_next):
        if request.method in self.BODY_METHODS:
            content_type = request.headers.get("content-type", "")
            if content_type and not content_type.startswith(JSON_MEDIA_TYPE):
                return JSONResponse(
                    status_code=415,
                    content={"detail": f"Unsupported Media Type. Use {JSON_MEDIA_TYPE}"},
                )
        return await call_next(request)


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Unhandled database error",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_middlewares(app: FastAPI) -> None:
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(ContentTypeValidationMiddleware)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
