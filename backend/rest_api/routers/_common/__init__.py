"""
Common utilities shared across routers.
"""

from .auth import require_auth, current_principal, require_action

__all__ = [
    "require_auth",
    "current_principal",
    "require_action",
]
