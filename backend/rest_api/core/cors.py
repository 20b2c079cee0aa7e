"""
CORS for the storefront and staff dashboard front-ends.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import settings
from shared.infrastructure.correlation import REQUEST_ID_HEADER

# Local dev servers of both front-ends
DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

# Everything the API routes use
ALLOWED_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]

ALLOWED_HEADERS = [
    "Authorization",       # staff JWT
    "X-Tracking-Token",    # customer tracking credential
    "Content-Type",
    "Accept",
    REQUEST_ID_HEADER,
]


def get_cors_origins() -> list[str]:
    """ALLOWED_ORIGINS (comma-separated) when set, else the dev servers."""
    configured = [origin.strip() for origin in settings.allowed_origins.split(",")]
    return [origin for origin in configured if origin] or DEV_ORIGINS


def configure_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
        # No preflight caching while developing
        max_age=0 if settings.environment == "development" else 600,
    )
