"""
Session management: list (any staff), create/activate/close (admins).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common import require_action
from rest_api.services.domain import SessionService, session_to_output
from rest_api.services.permissions import Action
from shared.infrastructure.db import get_db
from shared.security.auth import Principal
from shared.utils.schemas import SessionCreate, SessionListResponse, SessionResponse


router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("", response_model=SessionListResponse)
def list_sessions(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.VIEW_SESSIONS)),
) -> SessionListResponse:
    """All sessions, newest first."""
    sessions = SessionService(db).list_sessions()
    return SessionListResponse(sessions=[session_to_output(s) for s in sessions])


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(
    body: SessionCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.MANAGE_SESSIONS)),
) -> SessionResponse:
    """Create an inactive session."""
    session = SessionService(db).create_session(body.name)
    return SessionResponse(session=session_to_output(session))


@router.post("/{session_id}/activate", response_model=SessionResponse)
def activate_session(
    session_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.MANAGE_SESSIONS)),
) -> SessionResponse:
    """Open this session for orders; any other active session is closed."""
    session = SessionService(db).activate_session(session_id, actor_user_id=principal.id)
    return SessionResponse(session=session_to_output(session))


@router.post("/{session_id}/close", response_model=SessionResponse)
def close_session(
    session_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.MANAGE_SESSIONS)),
) -> SessionResponse:
    session = SessionService(db).close_session(session_id, actor_user_id=principal.id)
    return SessionResponse(session=session_to_output(session))
