"""
Utilities module: Exceptions, validators, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    NoActiveSessionError,
    ForbiddenError,
    ValidationError,
    ConflictError,
    UnauthenticatedError,
)
from shared.utils.validators import (
    validate_image_url,
    validate_badges,
    require_text,
    normalize_email,
)

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "NoActiveSessionError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    "UnauthenticatedError",
    # validators
    "validate_image_url",
    "validate_badges",
    "require_text",
    "normalize_email",
]
