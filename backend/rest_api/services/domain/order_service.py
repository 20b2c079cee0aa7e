"""
Order Lifecycle Engine.

Creates orders from reconciled carts and governs assignment, status and
release of orders in the active session.

Concurrency model:
- Order + items + outbox event are inserted in one transaction
- Assignment is an optimistic conditional UPDATE (assignee IS NULL);
  losers of the race observe zero rows and get a ConflictError
- Status updates and release lock the order row while deciding
- Orders of a closed session are frozen: every mutation rejects them

Status values are PENDING, MAKING and READY. Any value may be set at any
time unless strict_status_transitions is enabled, which allows only
PENDING -> MAKING -> READY.
"""

from __future__ import annotations

import secrets
from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Order, OrderItem, utcnow
from rest_api.services.domain.cart_service import CartService
from rest_api.services.domain.session_service import SessionService
from rest_api.services.events import write_order_outbox_event
from rest_api.services.permissions import Action, ActorRef, require_capability
from shared.config.constants import ORDER_TRANSITIONS, Limits, OrderStatus, Roles
from shared.config.logging import orders_logger as logger, mask_phone
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.infrastructure.events import (
    ORDER_ASSIGNED,
    ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    ORDER_UNASSIGNED,
)
from shared.security.auth import derive_tracking_credential
from shared.utils.exceptions import (
    ConflictError,
    InvalidTransitionError,
    OrderNotFoundError,
    OrderNotInActiveSessionError,
    ValidationError,
)
from shared.utils.schemas import CartLine, OrderItemOutput, OrderOutput, RemovedCartLine
from shared.utils.validators import require_text

ALREADY_ASSIGNED = "Order already assigned to another user."


@dataclass
class PlacedOrder:
    """Result of a placement attempt. order is None when nothing survived reconciliation."""

    order: OrderOutput | None
    removed: list[RemovedCartLine] = field(default_factory=list)
    tracking_credential: str | None = None


@dataclass
class TrackedOrder:
    order: OrderOutput
    tracking_credential: str


def new_tracking_token() -> str:
    return secrets.token_urlsafe(24)


def order_to_output(order: Order, items: list[OrderItem] | None = None) -> OrderOutput:
    """Build the joined order view (worker name, items with menu names)."""
    lines = order.items if items is None else items
    return OrderOutput(
        id=order.id,
        session_id=order.session_id,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        status=order.status,
        assigned_worker_id=order.assigned_worker_id,
        assigned_worker_name=order.assigned_worker.name if order.assigned_worker else None,
        assigned_at=order.assigned_at,
        total_price_cents=order.total_price_cents,
        created_at=order.created_at,
        updated_at=order.updated_at,
        fulfilled_at=order.fulfilled_at,
        items=[
            OrderItemOutput(
                id=line.id,
                menu_item_id=line.menu_item_id,
                menu_item_name=line.menu_item.name if line.menu_item else None,
                quantity=line.quantity,
                unit_price_cents=line.unit_price_cents,
            )
            for line in lines
        ],
    )


class OrderService:
    """
    Domain service for the order lifecycle.

    Role checks for status updates and release go through the central
    permission policy; the HTTP layer handles the coarse per-route checks.
    """

    def __init__(self, db: Session, strict_transitions: bool | None = None):
        self._db = db
        self._sessions = SessionService(db)
        self._cart = CartService(db)
        if strict_transitions is None:
            strict_transitions = settings.strict_status_transitions
        self._strict = strict_transitions

    # =========================================================================
    # Public (anonymous) operations
    # =========================================================================

    def create_public_order(
        self,
        customer_name: str | None,
        customer_phone: str | None,
        lines: list[CartLine],
    ) -> PlacedOrder:
        """
        Place an order in the active session.

        Raises:
            ValidationError: If the customer name is blank or the total is
                above Limits.MAX_ORDER_TOTAL_CENTS.
            NoActiveSessionError: If the stand is closed.
        """
        try:
            name = require_text(customer_name, "Customer name")
        except ValueError as e:
            raise ValidationError(str(e), field="customer_name")
        phone = (customer_phone or "").strip() or None

        session = self._sessions.get_active_session()
        reconciled = self._cart.refresh_cart_items(lines)

        if not reconciled.active:
            logger.info(
                "Order rejected, no available items",
                session_id=session.id,
                removed=len(reconciled.removed),
            )
            return PlacedOrder(order=None, removed=reconciled.removed)

        total = sum(line.price_cents * line.quantity for line in reconciled.active)
        if total > Limits.MAX_ORDER_TOTAL_CENTS:
            raise ValidationError(
                "Order total exceeds the allowed maximum.",
                session_id=session.id,
                total_cents=total,
            )
        order = Order(
            session_id=session.id,
            customer_name=name,
            customer_phone=phone,
            status=OrderStatus.PENDING,
            total_price_cents=total,
            tracking_token=new_tracking_token(),
        )
        order.items = [
            OrderItem(
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                unit_price_cents=line.price_cents,
            )
            for line in reconciled.active
        ]
        self._db.add(order)
        self._db.flush()

        write_order_outbox_event(self._db, ORDER_CREATED, order, actor_role="ANON")
        safe_commit(self._db)

        logger.info(
            "Order created",
            order_id=order.id,
            session_id=session.id,
            total_cents=total,
            lines=len(reconciled.active),
            phone=mask_phone(phone),
        )
        view = self._get_view(order.id)
        return PlacedOrder(
            order=view,
            removed=reconciled.removed,
            tracking_credential=derive_tracking_credential(order.tracking_token),
        )

    def get_public_order(self, order_id: int, tracking_token: str) -> TrackedOrder:
        """
        Order view plus a freshly derived tracking credential.

        tracking_token comes from the caller's credential and must belong
        to order_id. A mismatch answers like an unknown id, so walking ids
        reveals nothing about other customers' orders.
        """
        order = self._load_order(order_id)
        if order is None or not secrets.compare_digest(
            order.tracking_token.encode(), tracking_token.encode()
        ):
            raise OrderNotFoundError(order_id)
        return TrackedOrder(
            order=order_to_output(order),
            tracking_credential=derive_tracking_credential(order.tracking_token),
        )

    def get_order_by_tracking_token(self, tracking_token: str) -> OrderOutput:
        order = self._db.scalar(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.tracking_token == tracking_token)
        )
        if order is None:
            raise OrderNotFoundError()
        return order_to_output(order)

    # =========================================================================
    # Staff queue
    # =========================================================================

    def list_active_session_orders(self) -> list[OrderOutput]:
        """
        Orders of the active session, oldest first, with items attached by
        one batched query.

        Raises:
            NoActiveSessionError: If no session is open.
        """
        session = self._sessions.get_active_session()
        orders = self._db.scalars(
            select(Order)
            .where(Order.session_id == session.id)
            .order_by(Order.created_at.asc(), Order.id.asc())
        ).all()
        if not orders:
            return []

        lines_by_order: dict[int, list[OrderItem]] = defaultdict(list)
        for line in self._db.scalars(
            select(OrderItem)
            .where(OrderItem.order_id.in_([o.id for o in orders]))
            .order_by(OrderItem.id)
        ).all():
            lines_by_order[line.order_id].append(line)

        return [order_to_output(o, lines_by_order.get(o.id, [])) for o in orders]

    def assign_order_to_user(
        self,
        order_id: int,
        user_id: int,
        user_role: str = Roles.WORKER,
    ) -> OrderOutput:
        """
        Claim an order for user_id.

        Idempotent for the current assignee.

        Raises:
            OrderNotInActiveSessionError: Order belongs to a closed session.
            ConflictError: Another user holds the order or won the race.
        """
        order = self._get_order_in_active_session(order_id)

        if order.assigned_worker_id == user_id:
            return order_to_output(order)
        if order.assigned_worker_id is not None:
            raise ConflictError(ALREADY_ASSIGNED, order_id=order_id, user_id=user_id)

        now = utcnow()
        result = self._db.execute(
            update(Order)
            .where(Order.id == order_id, Order.assigned_worker_id.is_(None))
            .values(assigned_worker_id=user_id, assigned_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self._db.rollback()
            current = self._load_order(order_id)
            if current is not None and current.assigned_worker_id == user_id:
                return order_to_output(current)
            raise ConflictError(ALREADY_ASSIGNED, order_id=order_id, user_id=user_id)

        self._db.refresh(order)
        write_order_outbox_event(
            self._db, ORDER_ASSIGNED, order, actor_user_id=user_id, actor_role=user_role
        )
        safe_commit(self._db)

        logger.info("Order assigned", order_id=order_id, user_id=user_id)
        return self._get_view(order_id)

    def update_order_status(
        self,
        order_id: int,
        status: str,
        user_id: int,
        user_role: str,
    ) -> OrderOutput:
        """
        Set the status of an order.

        Allowed for the assignee and for admins.

        Raises:
            OrderNotInActiveSessionError: Order belongs to a closed session.
            ForbiddenError: Caller is neither the assignee nor an admin.
            ValidationError: Unknown status value.
            InvalidTransitionError: Backward or skipped move in strict mode.
        """
        order = self._get_order_in_active_session(order_id, lock=True)
        require_capability(ActorRef(user_id, user_role), Action.UPDATE_ORDER_STATUS, order)

        if status not in OrderStatus.ALL:
            raise ValidationError("Invalid status.", order_id=order_id, status=status)

        previous = order.status
        if self._strict:
            if status == previous:
                return order_to_output(order)
            if status not in ORDER_TRANSITIONS.get(previous, []):
                raise InvalidTransitionError("Order", previous, status, order_id=order_id)

        now = utcnow()
        order.status = status
        order.updated_at = now
        if status == OrderStatus.READY:
            if previous != OrderStatus.READY:
                order.fulfilled_at = now
        else:
            order.fulfilled_at = None

        write_order_outbox_event(
            self._db, ORDER_STATUS_CHANGED, order, actor_user_id=user_id, actor_role=user_role
        )
        safe_commit(self._db)

        logger.info(
            "Order status updated",
            order_id=order_id,
            from_status=previous,
            to_status=status,
            user_id=user_id,
        )
        return self._get_view(order_id)

    def unassign_order(
        self,
        order_id: int,
        user_id: int,
        user_role: str = Roles.WORKER,
    ) -> OrderOutput:
        """
        Release an order back to the queue.

        Only the assignee may release an assigned order; admins get no
        override here (see the permission strategies).

        Raises:
            OrderNotInActiveSessionError: Order belongs to a closed session.
            ForbiddenError: Order is assigned to someone else.
        """
        order = self._get_order_in_active_session(order_id, lock=True)
        require_capability(ActorRef(user_id, user_role), Action.UNASSIGN_ORDER, order)

        order.assigned_worker_id = None
        order.assigned_at = None
        order.updated_at = utcnow()

        write_order_outbox_event(
            self._db, ORDER_UNASSIGNED, order, actor_user_id=user_id, actor_role=user_role
        )
        safe_commit(self._db)

        logger.info("Order unassigned", order_id=order_id, user_id=user_id)
        return self._get_view(order_id)

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _load_order(self, order_id: int, lock: bool = False) -> Order | None:
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        if lock:
            stmt = stmt.with_for_update(of=Order)
        return self._db.scalar(stmt)

    def _get_view(self, order_id: int) -> OrderOutput:
        order = self._load_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order_to_output(order)

    def _get_order_in_active_session(self, order_id: int, lock: bool = False) -> Order:
        order = self._load_order(order_id, lock=lock)
        if order is None:
            raise OrderNotFoundError(order_id)
        session = self._sessions.get_active_session()
        if order.session_id != session.id:
            raise OrderNotInActiveSessionError(order_id, session_id=order.session_id)
        return order
