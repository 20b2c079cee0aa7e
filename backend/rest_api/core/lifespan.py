"""
Application lifespan: startup checks, schema creation and the outbox
processor task.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from rest_api.models import Base
from rest_api.services.events import start_outbox_processor, stop_outbox_processor
from shared.config.logging import rest_api_logger as logger, setup_logging
from shared.config.settings import settings
from shared.infrastructure.db import engine
from shared.infrastructure.events import close_redis_pool


def check_configuration() -> None:
    """
    Refuse to start in production with default or weak secrets; only warn
    elsewhere.
    """
    problems = settings.validate_production_secrets()
    for problem in problems:
        logger.error("Configuration error", error=problem)

    if problems and settings.environment == "production":
        raise RuntimeError("Insecure production configuration: " + "; ".join(problems))
    if problems:
        logger.warning("Running with development defaults")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    check_configuration()

    logger.info(
        "Starting REST API",
        port=settings.rest_api_port,
        env=settings.environment,
        strict_status_transitions=settings.strict_status_transitions,
    )

    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created/verified")

    if settings.outbox_processor_enabled:
        await start_outbox_processor()

    try:
        yield
    finally:
        logger.info("Shutting down REST API")
        if settings.outbox_processor_enabled:
            await stop_outbox_processor()
        await close_redis_pool()
