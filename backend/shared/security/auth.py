"""
Authentication utilities.

Staff authenticate with HS256 JWTs carrying their user id. Customers poll
their order with a tracking credential: a short-lived JWT signed with a
separate secret and audience, derived on demand from the order's stored
tracking token and never persisted.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Header

from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    TRACKING_TOKEN_SECRET,
    settings,
)
from shared.config.logging import get_logger
from shared.utils.exceptions import UnauthenticatedError

logger = get_logger(__name__)

TRACKING_ROLE = "anon"


@dataclass(frozen=True)
class Principal:
    """An authenticated staff member."""

    id: int
    email: str
    role: str
    name: str


# =============================================================================
# Staff JWT
# =============================================================================


def sign_jwt(payload: dict[str, Any], ttl_seconds: int | None = None) -> str:
    """
    Sign a staff JWT with the given claims.

    Args:
        payload: Claims to include (sub, email, role).
        ttl_seconds: Token lifetime. Defaults to the access token expiry.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def sign_access_token(user_id: int, email: str, role: str) -> str:
    return sign_jwt({"sub": str(user_id), "email": email, "role": role})


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a staff JWT.

    Raises:
        UnauthenticatedError: If the token is invalid, expired or lacks a
            usable subject claim.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token has expired")
    except jwt.InvalidTokenError as e:
        # Details stay in the log, the client gets a generic message
        logger.warning("JWT validation failed", error=str(e))
        raise UnauthenticatedError("Invalid token")

    try:
        int(payload["sub"])
    except (ValueError, TypeError):
        raise UnauthenticatedError("Invalid token: malformed subject claim")

    return payload


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        UnauthenticatedError: If header is missing or malformed.
    """
    if not authorization:
        raise UnauthenticatedError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Invalid Authorization header format")
    return token.strip()


# =============================================================================
# Tracking credentials (anonymous customers)
# =============================================================================


def derive_tracking_credential(tracking_token: str, ttl_seconds: int | None = None) -> str:
    """
    Derive a time-limited credential for an order's tracking token.

    Pure function of the token and the current time; called on every
    order read instead of storing credentials.
    """
    if not tracking_token:
        raise ValueError("tracking_token is required")
    if ttl_seconds is None:
        ttl_seconds = settings.tracking_token_expire_hours * 60 * 60

    now = int(time.time())
    payload = {
        "role": TRACKING_ROLE,
        "tracking_token": tracking_token,
        "iss": settings.tracking_token_issuer,
        "aud": settings.tracking_token_audience,
        "iat": now,
        "exp": now + ttl_seconds,
    }
    return jwt.encode(payload, TRACKING_TOKEN_SECRET, algorithm="HS256")


def verify_tracking_credential(credential: str) -> str:
    """
    Verify a tracking credential and return the tracking token it is bound to.

    Raises:
        UnauthenticatedError: If the credential is invalid or expired.
    """
    try:
        payload = jwt.decode(
            credential,
            TRACKING_TOKEN_SECRET,
            algorithms=["HS256"],
            audience=settings.tracking_token_audience,
            issuer=settings.tracking_token_issuer,
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Tracking credential has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Tracking credential validation failed", error=str(e))
        raise UnauthenticatedError("Invalid tracking credential")

    token = payload.get("tracking_token")
    if payload.get("role") != TRACKING_ROLE or not isinstance(token, str) or not token:
        raise UnauthenticatedError("Invalid tracking credential")
    return token


def current_tracking_token(
    x_tracking_token: str | None = Header(default=None, alias="X-Tracking-Token"),
) -> str:
    """
    FastAPI dependency resolving the X-Tracking-Token header to the
    order tracking token it grants access to.
    """
    if not x_tracking_token:
        raise UnauthenticatedError("Missing X-Tracking-Token header")
    return verify_tracking_credential(x_tracking_token)
