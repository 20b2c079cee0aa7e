"""
SQLAlchemy ORM Models Package.

- base: Base class and column helpers
- session: PopupSession
- menu: MenuItem
- order: Order, OrderItem
- user: User, InviteToken
- outbox: OutboxEvent, OutboxStatus, AggregateType
"""

from .base import Base, as_utc, utcnow
from .session import PopupSession
from .menu import MenuItem
from .order import Order, OrderItem
from .user import User, InviteToken
from .outbox import AggregateType, OutboxEvent, OutboxStatus

__all__ = [
    "Base",
    "as_utc",
    "utcnow",
    "PopupSession",
    "MenuItem",
    "Order",
    "OrderItem",
    "User",
    "InviteToken",
    "AggregateType",
    "OutboxEvent",
    "OutboxStatus",
]
