"""
Session Registry.

Tracks the single active selling window. Every ordering and queue
operation is scoped to the active session.

Usage:
    from rest_api.services.domain import SessionService

    service = SessionService(db)
    session = service.get_active_session()
"""

from __future__ import annotations

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from rest_api.models import PopupSession
from rest_api.services.events import write_session_outbox_event
from shared.config.logging import sessions_logger as logger
from shared.infrastructure.db import safe_commit
from shared.infrastructure.events import SESSION_ACTIVATED, SESSION_CLOSED
from shared.utils.exceptions import NoActiveSessionError, NotFoundError, ValidationError
from shared.utils.schemas import SessionOutput
from shared.utils.validators import require_text


def session_to_output(session: PopupSession) -> SessionOutput:
    return SessionOutput(
        id=session.id,
        name=session.name,
        is_active=session.is_active,
        created_at=session.created_at,
    )


class SessionService:
    """
    Business rules:
    - At most one session is active at any time
    - Sessions are created inactive
    - Closing an inactive session succeeds without changes
    """

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Query Methods
    # =========================================================================

    def find_active_session(self) -> PopupSession | None:
        return self._db.scalar(
            select(PopupSession)
            .where(PopupSession.is_active.is_(True))
            .order_by(PopupSession.id)
            .limit(1)
        )

    def get_active_session(self) -> PopupSession:
        """
        Raises:
            NoActiveSessionError: If no session is open.
        """
        session = self.find_active_session()
        if session is None:
            raise NoActiveSessionError()
        return session

    def list_sessions(self) -> list[PopupSession]:
        """All sessions, newest first."""
        return list(
            self._db.scalars(
                select(PopupSession).order_by(
                    PopupSession.created_at.desc(), PopupSession.id.desc()
                )
            ).all()
        )

    def get_session(self, session_id: int) -> PopupSession:
        session = self._db.get(PopupSession, session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        return session

    # =========================================================================
    # Command Methods
    # =========================================================================

    def create_session(self, name: str) -> PopupSession:
        try:
            clean_name = require_text(name, "Session name")
        except ValueError as e:
            raise ValidationError(str(e), field="name")

        session = PopupSession(name=clean_name, is_active=False)
        self._db.add(session)
        safe_commit(self._db)
        self._db.refresh(session)

        logger.info("Session created", session_id=session.id, name=clean_name)
        return session

    def activate_session(self, session_id: int, actor_user_id: int | None = None) -> PopupSession:
        """
        Make session_id the only active session.

        A single UPDATE rewrites is_active on every row, so concurrent
        activations serialize on the row locks and the last one to commit
        wins; two sessions are never active at once.
        """
        session = self.get_session(session_id)

        self._db.execute(
            update(PopupSession)
            .values(is_active=case((PopupSession.id == session_id, True), else_=False))
            .execution_options(synchronize_session=False)
        )
        self._db.refresh(session)
        write_session_outbox_event(
            self._db, SESSION_ACTIVATED, session, actor_user_id=actor_user_id
        )
        safe_commit(self._db)
        self._db.refresh(session)

        logger.info("Session activated", session_id=session_id, actor_user_id=actor_user_id)
        return session

    def close_session(self, session_id: int, actor_user_id: int | None = None) -> PopupSession:
        session = self.get_session(session_id)
        if not session.is_active:
            return session

        session.is_active = False
        write_session_outbox_event(
            self._db, SESSION_CLOSED, session, actor_user_id=actor_user_id
        )
        safe_commit(self._db)
        self._db.refresh(session)

        logger.info("Session closed", session_id=session_id, actor_user_id=actor_user_id)
        return session
