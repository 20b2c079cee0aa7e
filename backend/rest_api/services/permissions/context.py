"""
Permission Context - Main entry point for permission checks.

Usage:
    from rest_api.services.permissions import can, require_capability, Action

    if can(principal, Action.MANAGE_MENU):
        ...

    require_capability(principal, Action.UPDATE_ORDER_STATUS, order)
"""

from __future__ import annotations

from typing import NamedTuple, Protocol

from shared.utils.exceptions import ForbiddenError
from .strategies import Action, HasAssignee, PermissionStrategy, get_strategy, is_admin_role


class Actor(Protocol):
    id: int
    role: str


class ActorRef(NamedTuple):
    """Minimal actor for callers that only know the user id and role."""
    id: int
    role: str


# Messages surfaced to staff clients for order-level denials
ORDER_DENIAL_MESSAGES = {
    Action.UPDATE_ORDER_STATUS: "You are not assigned to this order.",
    Action.UNASSIGN_ORDER: "Only the assigned worker can unassign this order.",
}


class PermissionContext:
    """
    Permission checks for one actor.

    Usage:
        ctx = PermissionContext(principal)
        if ctx.can(Action.ASSIGN_ORDER):
            ...
    """

    def __init__(self, actor: Actor):
        self._actor = actor
        self._strategy = get_strategy(actor.role)

    @property
    def user_id(self) -> int:
        return self._actor.id

    @property
    def role(self) -> str:
        return self._actor.role

    @property
    def strategy(self) -> PermissionStrategy:
        return self._strategy

    @property
    def is_admin(self) -> bool:
        """OWNER counts as admin."""
        return is_admin_role(self._actor.role)

    def can(self, action: Action, order: HasAssignee | None = None) -> bool:
        return self._strategy.can(self._actor.id, action, order)

    def require(self, action: Action, order: HasAssignee | None = None) -> None:
        """Raise ForbiddenError unless the action is allowed."""
        if self.can(action, order):
            return
        detail = ORDER_DENIAL_MESSAGES.get(action) if order is not None else None
        raise ForbiddenError(
            action.value.lower().replace("_", " "),
            detail=detail,
            user_id=self._actor.id,
            role=self._actor.role,
        )


def can(actor: Actor, action: Action, order: HasAssignee | None = None) -> bool:
    return PermissionContext(actor).can(action, order)


def require_capability(actor: Actor, action: Action, order: HasAssignee | None = None) -> None:
    PermissionContext(actor).require(action, order)
