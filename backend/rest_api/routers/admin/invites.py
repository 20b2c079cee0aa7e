"""
Invite creation (admins only).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common import require_action
from rest_api.services.domain import InviteService, invite_to_output
from rest_api.services.permissions import Action
from shared.infrastructure.db import get_db
from shared.security.auth import Principal
from shared.utils.schemas import InviteCreate, InviteResponse


router = APIRouter(prefix="/api/invites", tags=["invites"])


@router.post("", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
def create_invite(
    body: InviteCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.CREATE_INVITE)),
) -> InviteResponse:
    """Single-use code granting ADMIN or WORKER."""
    invite = InviteService(db).create_invite(
        role=body.role,
        created_by_user_id=principal.id,
        expires_in_hours=body.expires_in_hours,
    )
    return InviteResponse(invite=invite_to_output(invite))
