"""
Staff accounts: invite redemption, password login and profile updates.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import InviteToken, User, as_utc, utcnow
from shared.config.constants import Limits, Roles
from shared.config.logging import auth_logger as logger, audit_auth_event
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.auth import sign_access_token
from shared.security.password import hash_password, verify_password
from shared.utils.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from shared.utils.schemas import UserOutput
from shared.utils.validators import normalize_email, require_text

INVALID_INVITE = "Invalid or already used invite code"
EXPIRED_INVITE = "Invite code has expired"
EMAIL_TAKEN = "User with this email already exists"
INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class AuthResult:
    token: str
    user: User


def user_to_output(user: User) -> UserOutput:
    return UserOutput(id=user.id, email=user.email, role=user.role, name=user.name)


class AuthService:
    def __init__(self, db: Session):
        self._db = db

    def get_user(self, user_id: int) -> User | None:
        return self._db.get(User, user_id)

    def signup_with_invite(
        self,
        name: str,
        email: str,
        password: str,
        invite_code: str,
        ip_address: str | None = None,
    ) -> AuthResult:
        """
        Redeem an invite and create the user in one transaction.

        The invite is claimed with a conditional UPDATE (used_at IS NULL),
        so two concurrent redemptions of one code cannot both succeed.
        Any failure rolls back the claim.
        """
        try:
            clean_name = require_text(name, "Name")
        except ValueError as e:
            raise ValidationError(str(e), field="name")
        if not password or len(password) < Limits.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {Limits.MIN_PASSWORD_LENGTH} characters",
                field="password",
            )
        clean_email = normalize_email(email)
        code = (invite_code or "").strip().upper()

        now = utcnow()
        claimed = self._db.execute(
            update(InviteToken)
            .where(InviteToken.code == code, InviteToken.used_at.is_(None))
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            self._db.rollback()
            audit_auth_event("SIGNUP", email=clean_email, success=False, reason="invalid_invite", ip_address=ip_address)
            raise ValidationError(INVALID_INVITE)

        invite = self._db.scalar(
            select(InviteToken)
            .where(InviteToken.code == code)
            .execution_options(populate_existing=True)
        )
        expires_at = as_utc(invite.expires_at)
        if expires_at is not None and expires_at < now:
            self._db.rollback()
            audit_auth_event("SIGNUP", email=clean_email, success=False, reason="expired_invite", ip_address=ip_address)
            raise ValidationError(EXPIRED_INVITE)

        if self._db.scalar(select(User.id).where(User.email == clean_email)) is not None:
            self._db.rollback()
            audit_auth_event("SIGNUP", email=clean_email, success=False, reason="email_taken", ip_address=ip_address)
            raise ConflictError(EMAIL_TAKEN)

        user = User(
            email=clean_email,
            password_hash=hash_password(password),
            role=invite.role,
            name=clean_name,
        )
        self._db.add(user)
        try:
            self._db.flush()
            invite.used_by_user_id = user.id
            safe_commit(self._db)
        except IntegrityError:
            self._db.rollback()
            raise ConflictError(EMAIL_TAKEN)

        self._db.refresh(user)
        audit_auth_event("SIGNUP", user_id=user.id, email=user.email, role=user.role, ip_address=ip_address)
        return AuthResult(token=sign_access_token(user.id, user.email, user.role), user=user)

    def create_owner(self, name: str, email: str, password: str) -> User:
        """
        Bootstrap an OWNER account. Owners are never created through
        invites; this is only reachable from the CLI.
        """
        if not password or len(password) < Limits.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {Limits.MIN_PASSWORD_LENGTH} characters",
                field="password",
            )
        try:
            clean_name = require_text(name, "Name")
        except ValueError as e:
            raise ValidationError(str(e), field="name")
        clean_email = normalize_email(email)

        if self._db.scalar(select(User.id).where(User.email == clean_email)) is not None:
            raise ConflictError(EMAIL_TAKEN)

        user = User(
            email=clean_email,
            password_hash=hash_password(password),
            role=Roles.OWNER,
            name=clean_name,
        )
        self._db.add(user)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError(EMAIL_TAKEN)

        self._db.refresh(user)
        audit_auth_event("OWNER_CREATED", user_id=user.id, email=user.email)
        return user

    def login_with_password(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
    ) -> AuthResult:
        """Unknown email and wrong password fail with the same message."""
        clean_email = normalize_email(email)
        user = self._db.scalar(select(User).where(User.email == clean_email))

        if user is None or not verify_password(password, user.password_hash):
            audit_auth_event("LOGIN", email=clean_email, success=False, reason="invalid_credentials", ip_address=ip_address)
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        audit_auth_event("LOGIN", user_id=user.id, email=user.email, ip_address=ip_address)
        return AuthResult(token=sign_access_token(user.id, user.email, user.role), user=user)

    def update_profile(self, user_id: int, name: str) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        try:
            user.name = require_text(name, "Name")
        except ValueError as e:
            raise ValidationError(str(e), field="name")

        safe_commit(self._db)
        self._db.refresh(user)
        logger.info("Profile updated", user_id=user_id)
        return user

    @staticmethod
    def token_ttl_seconds() -> int:
        return settings.jwt_access_token_expire_minutes * 60
