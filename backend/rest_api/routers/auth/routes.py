"""
Authentication router.
Handles invite signup, password login and the current user's profile.
"""

from fastapi import APIRouter, Depends, Request, status
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from rest_api.routers._common import current_principal
from rest_api.services.domain import AuthService, user_to_output
from shared.config.logging import auth_logger as logger, mask_email
from shared.infrastructure.db import get_db
from shared.security.auth import Principal
from shared.security.rate_limit import limiter, LOGIN_LIMIT, SIGNUP_LIMIT
from shared.utils.exceptions import UnauthenticatedError
from shared.utils.schemas import (
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UpdateProfileRequest,
    UserResponse,
)


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(SIGNUP_LIMIT)
def signup(request: Request, body: SignupRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """
    Redeem an invite code and create a staff account.

    The role comes from the invite. Returns a staff JWT for the new user.
    """
    service = AuthService(db)
    result = service.signup_with_invite(
        name=body.name,
        email=body.email,
        password=body.password,
        invite_code=body.invite_code,
        ip_address=get_remote_address(request),
    )
    logger.info("SIGNUP_SUCCESS", email=mask_email(result.user.email), user_id=result.user.id)
    return AuthResponse(
        token=result.token,
        expires_in=service.token_ttl_seconds(),
        user=user_to_output(result.user),
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_LIMIT)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """
    Authenticate a staff member.

    Unknown email and wrong password both answer 401 "Invalid email or
    password".
    """
    service = AuthService(db)
    result = service.login_with_password(
        email=body.email,
        password=body.password,
        ip_address=get_remote_address(request),
    )
    return AuthResponse(
        token=result.token,
        expires_in=service.token_ttl_seconds(),
        user=user_to_output(result.user),
    )


@router.get("/me", response_model=UserResponse)
def get_me(
    principal: Principal = Depends(current_principal),
    db: Session = Depends(get_db),
) -> UserResponse:
    user = AuthService(db).get_user(principal.id)
    if user is None:
        raise UnauthenticatedError("User no longer exists")
    return UserResponse(user=user_to_output(user))


@router.patch("/me", response_model=UserResponse)
def update_me(
    body: UpdateProfileRequest,
    principal: Principal = Depends(current_principal),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Update the display name. Blank names are rejected."""
    user = AuthService(db).update_profile(principal.id, body.name)
    return UserResponse(user=user_to_output(user))
