"""
FastAPI application for the pop-up queue.

Run locally with:
    uvicorn rest_api.main:app --reload --port 4000
"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from rest_api.core import (
    configure_cors,
    lifespan,
    register_exception_handlers,
    register_middlewares,
)
from rest_api.routers.admin import router as admin_router
from rest_api.routers.auth import router as auth_router
from rest_api.routers.public import health_router, storefront_router
from rest_api.routers.staff import router as staff_router
from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler

API_VERSION = "1.0.0"


def create_app() -> FastAPI:
    application = FastAPI(
        title="Pop-up Queue API",
        description="Menu, cart and order queue for a pop-up beverage stand",
        version=API_VERSION,
        lifespan=lifespan,
    )

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    register_exception_handlers(application)

    # Added last so it wraps everything and tags CORS and 415 responses too
    register_middlewares(application)
    configure_cors(application)
    application.add_middleware(CorrelationIdMiddleware)

    for router in (health_router, storefront_router, auth_router, staff_router, admin_router):
        application.include_router(router)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=settings.debug,
    )
