"""
Services module for business logic.

- domain/: application services (sessions, menu, cart, orders, auth, invites)
- events/: transactional outbox and its Redis publisher loop
- permissions/: strategy pattern for role-based access control

Usage:
    from rest_api.services.domain import OrderService
    service = OrderService(db)
"""

from .permissions import (
    Action,
    ActorRef,
    PermissionContext,
    can,
    require_capability,
)
from .domain import (
    SessionService,
    MenuService,
    CartService,
    OrderService,
    AuthService,
    InviteService,
)

__all__ = [
    # Permissions
    "Action",
    "ActorRef",
    "PermissionContext",
    "can",
    "require_capability",
    # Domain services
    "SessionService",
    "MenuService",
    "CartService",
    "OrderService",
    "AuthService",
    "InviteService",
]
