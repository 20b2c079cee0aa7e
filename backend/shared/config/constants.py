"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import Roles, ADMIN_ROLES, OrderStatus

    if role in ADMIN_ROLES:
        ...

    if status == OrderStatus.READY:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants."""

    OWNER: Final[str] = "OWNER"  # Super-admin, never granted through invites
    ADMIN: Final[str] = "ADMIN"
    WORKER: Final[str] = "WORKER"

    ALL: Final[list[str]] = [OWNER, ADMIN, WORKER]


# Role groups for common access patterns
ADMIN_ROLES: Final[frozenset[str]] = frozenset({Roles.OWNER, Roles.ADMIN})
STAFF_ROLES: Final[frozenset[str]] = frozenset({Roles.OWNER, Roles.ADMIN, Roles.WORKER})
INVITABLE_ROLES: Final[frozenset[str]] = frozenset({Roles.ADMIN, Roles.WORKER})


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "PENDING"
    MAKING: Final[str] = "MAKING"
    READY: Final[str] = "READY"

    ALL: Final[list[str]] = [PENDING, MAKING, READY]


class RemovalReason:
    """Why a cart line was dropped during reconciliation."""

    NOT_FOUND: Final[str] = "NOT_FOUND"
    INACTIVE: Final[str] = "INACTIVE"


# =============================================================================
# Status Transitions
# =============================================================================

# Forward-only order transitions, enforced when strict_status_transitions is on
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [OrderStatus.MAKING],
    OrderStatus.MAKING: [OrderStatus.READY],
    OrderStatus.READY: [],  # Terminal state
}


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    MIN_PRICE_CENTS: Final[int] = 0
    MAX_PRICE_CENTS: Final[int] = 1_000_00  # $1,000
    MAX_QUANTITY: Final[int] = 99
    # Order totals are stored in 32-bit integer columns
    MAX_ORDER_TOTAL_CENTS: Final[int] = 100_000_00  # $100,000

    MAX_NAME_LENGTH: Final[int] = 255
    MAX_PHONE_LENGTH: Final[int] = 32
    MAX_BADGES: Final[int] = 8
    MAX_CART_LINES: Final[int] = 50
    MIN_PASSWORD_LENGTH: Final[int] = 8
