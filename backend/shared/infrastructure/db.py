"""
SQLAlchemy engine and sessions.

PostgreSQL (psycopg) in deployments; SQLite for local runs and tests.
Writes that must not race (assignment, activation, invite redemption) use
conditional UPDATEs, so both backends give the same guarantees.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from shared.config.settings import DATABASE_URL

MAX_POOL_SIZE = 20


def engine_options(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    cores = os.cpu_count() or 4
    return {
        "pool_pre_ping": True,
        "pool_size": min(2 * cores + 1, MAX_POOL_SIZE),
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "connect_args": {"connect_timeout": 10},
    }


engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session for FastAPI routes."""
    with SessionLocal() as db:
        yield db


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Session for the CLI and the outbox processor."""
    with SessionLocal() as db:
        yield db


def safe_commit(db: Session) -> None:
    """Commit, rolling back before re-raising on failure."""
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
