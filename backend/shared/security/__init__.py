"""
Security module: Authentication, password hashing, rate limiting.
"""

from shared.security.auth import (
    Principal,
    sign_jwt,
    sign_access_token,
    verify_jwt,
    get_bearer_token,
    derive_tracking_credential,
    verify_tracking_credential,
    current_tracking_token,
)
from shared.security.password import hash_password, verify_password
from shared.security.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
)

__all__ = [
    # auth
    "Principal",
    "sign_jwt",
    "sign_access_token",
    "verify_jwt",
    "get_bearer_token",
    "derive_tracking_credential",
    "verify_tracking_credential",
    "current_tracking_token",
    # password
    "hash_password",
    "verify_password",
    # rate_limit
    "limiter",
    "rate_limit_exceeded_handler",
]
