"""
Invite creation for staff signup.
"""

from __future__ import annotations

import secrets
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import InviteToken, utcnow
from shared.config.constants import INVITABLE_ROLES
from shared.config.logging import audit_auth_event
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import ConflictError, ValidationError
from shared.utils.schemas import InviteOutput

CODE_ATTEMPTS = 3


def generate_invite_code() -> str:
    """12 uppercase hex characters in three groups: XXXX-XXXX-XXXX."""
    raw = secrets.token_hex(6).upper()
    return f"{raw[0:4]}-{raw[4:8]}-{raw[8:12]}"


def invite_to_output(invite: InviteToken) -> InviteOutput:
    return InviteOutput(
        id=invite.id,
        code=invite.code,
        role=invite.role,
        expires_at=invite.expires_at,
        used_at=invite.used_at,
        created_at=invite.created_at,
    )


class InviteService:
    def __init__(self, db: Session):
        self._db = db

    def create_invite(
        self,
        role: str,
        created_by_user_id: int | None,
        expires_in_hours: int | None = None,
    ) -> InviteToken:
        """
        Create a single-use invite granting ADMIN or WORKER.

        expires_in_hours falls back to invite_expire_hours; 0 means the
        invite never expires.
        """
        role = (role or "").strip().upper()
        if role not in INVITABLE_ROLES:
            raise ValidationError("Invalid role for invite.", role=role)

        hours = settings.invite_expire_hours if expires_in_hours is None else expires_in_hours
        expires_at = utcnow() + timedelta(hours=hours) if hours else None

        for _ in range(CODE_ATTEMPTS):
            invite = InviteToken(
                code=generate_invite_code(),
                role=role,
                created_by_user_id=created_by_user_id,
                expires_at=expires_at,
            )
            self._db.add(invite)
            try:
                safe_commit(self._db)
            except IntegrityError:
                continue
            self._db.refresh(invite)
            audit_auth_event(
                "INVITE_CREATED",
                user_id=created_by_user_id,
                invite_id=invite.id,
                role=role,
            )
            return invite

        raise ConflictError("Could not generate a unique invite code. Please try again.")
