"""
Centralized authorization.

Every role check goes through can() / require_capability() so the whole
authorization matrix lives in strategies.py and is tested in one place.
"""

from .strategies import (
    Action,
    PermissionStrategy,
    AdminStrategy,
    WorkerStrategy,
    NoAccessStrategy,
    get_strategy,
)
from .context import (
    PermissionContext,
    ActorRef,
    can,
    require_capability,
)

__all__ = [
    # Strategies
    "Action",
    "PermissionStrategy",
    "AdminStrategy",
    "WorkerStrategy",
    "NoAccessStrategy",
    "get_strategy",
    # Context
    "PermissionContext",
    "ActorRef",
    "can",
    "require_capability",
]
