"""
Authentication dependencies for staff routers.

Usage:
    @router.get("/sessions")
    def list_sessions(principal: Principal = Depends(require_action(Action.VIEW_SESSIONS))):
        ...
"""

from typing import Callable

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.services.permissions import Action, require_capability
from shared.infrastructure.db import get_db
from shared.security.auth import Principal, get_bearer_token, verify_jwt
from shared.utils.exceptions import UnauthenticatedError


def require_auth(db: Session, authorization: str | None) -> Principal:
    """
    Resolve an Authorization header to the staff member it belongs to.

    The user is re-read on every request so deleted accounts lose access
    immediately and role changes apply without a new token.

    Raises:
        UnauthenticatedError: Missing or malformed header, bad signature,
            expired token, or unknown user.
    """
    token = get_bearer_token(authorization)
    payload = verify_jwt(token)

    user = db.get(User, int(payload["sub"]))
    if user is None:
        raise UnauthenticatedError("User no longer exists", user_id=payload["sub"])

    return Principal(id=user.id, email=user.email, role=user.role, name=user.name)


def current_principal(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Principal:
    """FastAPI dependency for any authenticated staff member."""
    return require_auth(db, authorization)


def require_action(action: Action) -> Callable[..., Principal]:
    """
    Dependency factory: authenticated principal allowed to perform action.

    Raises 403 through the central permission policy.
    """

    def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        require_capability(principal, action)
        return principal

    return dependency
