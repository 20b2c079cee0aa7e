"""
Password hashing utilities using bcrypt directly.
"""

import bcrypt

from shared.config.logging import get_logger

logger = get_logger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash a password using bcrypt.

    Example:
        hashed = hash_password("mypassword123")
        # Returns something like: $2b$12$...
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its bcrypt hash.

    Non-bcrypt hashes never verify.
    """
    if not hashed_password or not hashed_password.startswith(("$2a$", "$2b$", "$2y$")):
        logger.warning("Password check against a non-bcrypt hash")
        return False

    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
