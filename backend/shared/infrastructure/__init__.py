"""
Infrastructure: database sessions, request correlation and the Redis
live-update channel (events/).
"""

from shared.infrastructure.db import engine, SessionLocal, get_db, get_db_context, safe_commit
from shared.infrastructure.correlation import CorrelationIdMiddleware, get_request_id

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "safe_commit",
    "CorrelationIdMiddleware",
    "get_request_id",
]
