"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its dependencies.
"""

import time

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.logging import rest_api_logger as logger
from shared.infrastructure.db import get_db
from shared.infrastructure.events import check_redis_health
from shared.utils.schemas import DependencyHealth, DetailedHealthResponse, HealthResponse


router = APIRouter(prefix="/api", tags=["health"])

SERVICE_NAME = "rest-api"


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return HealthResponse(status="healthy", service=SERVICE_NAME)


def _ping_database(db: Session) -> DependencyHealth:
    start = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", error=str(e))
        return DependencyHealth(status="unhealthy", error=type(e).__name__)
    return DependencyHealth(status="healthy", latency_ms=round((time.perf_counter() - start) * 1000, 2))


async def _ping_redis() -> DependencyHealth:
    start = time.perf_counter()
    if not await check_redis_health():
        return DependencyHealth(status="unhealthy", error="unreachable")
    return DependencyHealth(status="healthy", latency_ms=round((time.perf_counter() - start) * 1000, 2))


@router.get("/health/detailed", response_model=DetailedHealthResponse)
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Detailed health check that verifies connectivity to the database and
    Redis.

    Returns 503 Service Unavailable if any dependency is down.
    """
    dependencies = {
        "database": await run_in_threadpool(_ping_database, db),
        "redis": await _ping_redis(),
    }
    all_healthy = all(dep.status == "healthy" for dep in dependencies.values())

    result = DetailedHealthResponse(
        status="healthy" if all_healthy else "degraded",
        service=SERVICE_NAME,
        dependencies=dependencies,
    )
    if not all_healthy:
        return JSONResponse(content=result.model_dump(mode="json"), status_code=503)
    return result
