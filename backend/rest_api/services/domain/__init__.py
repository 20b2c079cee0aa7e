"""
Domain Services - application layer.

Routers stay thin: they parse input, resolve the caller and delegate to a
service. Services own transactions, emit outbox events and raise the
typed errors from shared.utils.exceptions.

Usage:
    from rest_api.services.domain import OrderService

    service = OrderService(db)
    orders = service.list_active_session_orders()
"""

from .session_service import SessionService, session_to_output
from .menu_service import MenuService, menu_item_to_output
from .cart_service import CartService, normalize_cart_lines
from .order_service import OrderService, PlacedOrder, TrackedOrder, order_to_output
from .auth_service import AuthService, AuthResult, user_to_output
from .invite_service import InviteService, invite_to_output

__all__ = [
    "SessionService",
    "session_to_output",
    "MenuService",
    "menu_item_to_output",
    "CartService",
    "normalize_cart_lines",
    "OrderService",
    "PlacedOrder",
    "TrackedOrder",
    "order_to_output",
    "AuthService",
    "AuthResult",
    "user_to_output",
    "InviteService",
    "invite_to_output",
]
