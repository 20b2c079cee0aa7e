"""
Tests for the order lifecycle engine.
"""

import json

import pytest
from sqlalchemy import func, select

from rest_api.models import Order, OrderItem, OutboxEvent
from rest_api.services.domain import OrderService, SessionService
from shared.config.constants import Roles
from shared.infrastructure.events import (
    ORDER_ASSIGNED,
    ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    ORDER_UNASSIGNED,
)
from shared.security.auth import verify_tracking_credential
from shared.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NoActiveSessionError,
    OrderNotFoundError,
    OrderNotInActiveSessionError,
    ValidationError,
)
from shared.utils.schemas import CartLine


def outbox_types(db_session) -> list[str]:
    return list(
        db_session.scalars(select(OutboxEvent.event_type).order_by(OutboxEvent.id)).all()
    )


@pytest.fixture
def order(db_session, active_session, latte, cold_brew):
    placed = OrderService(db_session).create_public_order(
        "Jamie",
        "+1 555 0100",
        [
            CartLine(menu_item_id=latte.id, quantity=2),
            CartLine(menu_item_id=cold_brew.id, quantity=1),
        ],
    )
    return placed.order


class TestCreatePublicOrder:

    def test_creates_pending_unassigned_order(self, db_session, order, latte, cold_brew, active_session):
        assert order.status == "PENDING"
        assert order.assigned_worker_id is None
        assert order.session_id == active_session.id
        assert order.customer_name == "Jamie"
        assert order.total_price_cents == 2 * 550 + 475
        assert [(i.menu_item_id, i.quantity, i.unit_price_cents) for i in order.items] == [
            (latte.id, 2, 550),
            (cold_brew.id, 1, 475),
        ]
        assert order.items[0].menu_item_name == "Oat Latte"

    def test_returns_tracking_credential_for_order(self, db_session, active_session, latte):
        placed = OrderService(db_session).create_public_order(
            "Sam", None, [CartLine(menu_item_id=latte.id, quantity=1)]
        )
        stored = db_session.get(Order, placed.order.id)
        assert verify_tracking_credential(placed.tracking_credential) == stored.tracking_token

    def test_writes_one_created_event(self, db_session, order):
        assert outbox_types(db_session) == [ORDER_CREATED]
        payload = json.loads(db_session.scalar(select(OutboxEvent.payload)))
        assert payload["order_id"] == order.id
        assert payload["status"] == "PENDING"

    def test_drops_unavailable_lines(self, db_session, active_session, latte, retired_item):
        placed = OrderService(db_session).create_public_order(
            "Jamie",
            None,
            [
                CartLine(menu_item_id=latte.id, quantity=1),
                CartLine(menu_item_id=retired_item.id, quantity=1),
            ],
        )
        assert placed.order.total_price_cents == 550
        assert [r.reason for r in placed.removed] == ["INACTIVE"]

    def test_nothing_available_persists_nothing(self, db_session, active_session, retired_item):
        placed = OrderService(db_session).create_public_order(
            "Jamie", None, [CartLine(menu_item_id=retired_item.id, quantity=1)]
        )

        assert placed.order is None
        assert placed.tracking_credential is None
        assert [r.menu_item_id for r in placed.removed] == [retired_item.id]
        assert db_session.scalar(select(func.count(Order.id))) == 0
        assert outbox_types(db_session) == []

    def test_requires_active_session(self, db_session, inactive_session, latte):
        with pytest.raises(NoActiveSessionError):
            OrderService(db_session).create_public_order(
                "Jamie", None, [CartLine(menu_item_id=latte.id, quantity=1)]
            )
        assert db_session.scalar(select(func.count(Order.id))) == 0

    def test_requires_customer_name(self, db_session, active_session, latte):
        with pytest.raises(ValidationError):
            OrderService(db_session).create_public_order(
                "   ", None, [CartLine(menu_item_id=latte.id, quantity=1)]
            )

    def test_rejects_total_above_limit(self, db_session, active_session, latte):
        with pytest.raises(ValidationError) as exc:
            OrderService(db_session).create_public_order(
                "Jamie", None, [CartLine(menu_item_id=latte.id, quantity=20_000)]
            )
        assert exc.value.detail == "Order total exceeds the allowed maximum."
        assert db_session.scalar(select(func.count(Order.id))) == 0

    def test_price_snapshot_survives_menu_edit(self, db_session, order, latte):
        latte.price_cents = 999
        db_session.commit()

        unit_prices = db_session.scalars(
            select(OrderItem.unit_price_cents).where(OrderItem.menu_item_id == latte.id)
        ).all()
        assert unit_prices == [550]


class TestReadOrders:

    def test_get_public_order(self, db_session, order):
        token = db_session.get(Order, order.id).tracking_token
        tracked = OrderService(db_session).get_public_order(order.id, token)
        assert tracked.order.id == order.id
        assert tracked.tracking_credential

    def test_get_unknown_order(self, db_session):
        with pytest.raises(OrderNotFoundError) as exc:
            OrderService(db_session).get_public_order(31337, "whatever")
        assert exc.value.status_code == 404

    def test_get_public_order_with_foreign_token(self, db_session, order):
        with pytest.raises(OrderNotFoundError):
            OrderService(db_session).get_public_order(order.id, "token-of-another-order")

    def test_get_by_tracking_token(self, db_session, order):
        token = db_session.get(Order, order.id).tracking_token
        assert OrderService(db_session).get_order_by_tracking_token(token).id == order.id

    def test_list_active_session_orders_oldest_first(self, db_session, active_session, latte, order):
        service = OrderService(db_session)
        second = service.create_public_order("Riley", None, [CartLine(menu_item_id=latte.id, quantity=1)])

        orders = service.list_active_session_orders()

        assert [o.id for o in orders] == [order.id, second.order.id]
        assert len(orders[0].items) == 2
        assert len(orders[1].items) == 1

    def test_list_excludes_other_sessions(self, db_session, order, inactive_session):
        SessionService(db_session).activate_session(inactive_session.id)
        assert OrderService(db_session).list_active_session_orders() == []

    def test_list_without_active_session(self, db_session, inactive_session):
        with pytest.raises(NoActiveSessionError):
            OrderService(db_session).list_active_session_orders()


class TestAssignment:

    def test_assign(self, db_session, order, worker_user):
        assigned = OrderService(db_session).assign_order_to_user(order.id, worker_user.id)

        assert assigned.assigned_worker_id == worker_user.id
        assert assigned.assigned_worker_name == "Wes Worker"
        assert assigned.assigned_at is not None
        assert outbox_types(db_session) == [ORDER_CREATED, ORDER_ASSIGNED]

    def test_assign_is_idempotent_for_assignee(self, db_session, order, worker_user):
        service = OrderService(db_session)
        first = service.assign_order_to_user(order.id, worker_user.id)
        again = service.assign_order_to_user(order.id, worker_user.id)

        assert again.assigned_worker_id == worker_user.id
        assert again.assigned_at == first.assigned_at
        assert outbox_types(db_session) == [ORDER_CREATED, ORDER_ASSIGNED]

    def test_assign_taken_order_conflicts(self, db_session, order, worker_user, other_worker):
        service = OrderService(db_session)
        service.assign_order_to_user(order.id, worker_user.id)

        with pytest.raises(ConflictError) as exc:
            service.assign_order_to_user(order.id, other_worker.id)
        assert exc.value.status_code == 409
        assert exc.value.detail == "Order already assigned to another user."

    def test_assign_order_of_closed_session(self, db_session, order, active_session, worker_user):
        SessionService(db_session).close_session(active_session.id)

        with pytest.raises(NoActiveSessionError):
            OrderService(db_session).assign_order_to_user(order.id, worker_user.id)

    def test_assign_order_of_previous_session(self, db_session, order, inactive_session, worker_user):
        SessionService(db_session).activate_session(inactive_session.id)

        with pytest.raises(OrderNotInActiveSessionError) as exc:
            OrderService(db_session).assign_order_to_user(order.id, worker_user.id)
        assert exc.value.status_code == 404

    def test_assign_unknown_order(self, db_session, active_session, worker_user):
        with pytest.raises(OrderNotFoundError):
            OrderService(db_session).assign_order_to_user(424242, worker_user.id)


class TestStatusUpdates:

    def test_assignee_updates_status(self, db_session, order, worker_user):
        service = OrderService(db_session)
        service.assign_order_to_user(order.id, worker_user.id)

        updated = service.update_order_status(order.id, "MAKING", worker_user.id, Roles.WORKER)

        assert updated.status == "MAKING"
        assert outbox_types(db_session)[-1] == ORDER_STATUS_CHANGED

    def test_non_assignee_worker_forbidden(self, db_session, order, worker_user, other_worker):
        service = OrderService(db_session)
        service.assign_order_to_user(order.id, worker_user.id)

        with pytest.raises(ForbiddenError) as exc:
            service.update_order_status(order.id, "MAKING", other_worker.id, Roles.WORKER)
        assert exc.value.detail == "You are not assigned to this order."

    def test_worker_cannot_update_unassigned_order(self, db_session, order, worker_user):
        with pytest.raises(ForbiddenError):
            OrderService(db_session).update_order_status(order.id, "MAKING", worker_user.id, Roles.WORKER)

    @pytest.mark.parametrize("role", [Roles.ADMIN, Roles.OWNER])
    def test_admin_class_updates_any_order(self, db_session, order, worker_user, admin_user, role):
        service = OrderService(db_session)
        service.assign_order_to_user(order.id, worker_user.id)

        updated = service.update_order_status(order.id, "READY", admin_user.id, role)
        assert updated.status == "READY"
        assert updated.assigned_worker_id == worker_user.id

    def test_invalid_status(self, db_session, order, admin_user):
        with pytest.raises(ValidationError) as exc:
            OrderService(db_session).update_order_status(order.id, "DONE", admin_user.id, Roles.ADMIN)
        assert exc.value.detail == "Invalid status."

    def test_loose_mode_allows_any_move(self, db_session, order, admin_user):
        service = OrderService(db_session, strict_transitions=False)
        service.update_order_status(order.id, "READY", admin_user.id, Roles.ADMIN)
        back = service.update_order_status(order.id, "PENDING", admin_user.id, Roles.ADMIN)
        assert back.status == "PENDING"

    def test_strict_mode_rejects_backward_and_skipped_moves(self, db_session, order, admin_user):
        service = OrderService(db_session, strict_transitions=True)

        with pytest.raises(InvalidTransitionError):
            service.update_order_status(order.id, "READY", admin_user.id, Roles.ADMIN)

        service.update_order_status(order.id, "MAKING", admin_user.id, Roles.ADMIN)
        with pytest.raises(InvalidTransitionError):
            service.update_order_status(order.id, "PENDING", admin_user.id, Roles.ADMIN)

    def test_strict_mode_same_status_is_noop(self, db_session, order, admin_user):
        service = OrderService(db_session, strict_transitions=True)
        same = service.update_order_status(order.id, "PENDING", admin_user.id, Roles.ADMIN)

        assert same.status == "PENDING"
        assert outbox_types(db_session) == [ORDER_CREATED]

    def test_fulfilled_at_follows_ready(self, db_session, order, admin_user):
        service = OrderService(db_session)

        ready = service.update_order_status(order.id, "READY", admin_user.id, Roles.ADMIN)
        assert ready.fulfilled_at is not None

        again = service.update_order_status(order.id, "READY", admin_user.id, Roles.ADMIN)
        assert again.fulfilled_at == ready.fulfilled_at

        making = service.update_order_status(order.id, "MAKING", admin_user.id, Roles.ADMIN)
        assert making.fulfilled_at is None

    def test_update_order_of_previous_session(self, db_session, order, inactive_session, admin_user):
        SessionService(db_session).activate_session(inactive_session.id)
        with pytest.raises(OrderNotInActiveSessionError):
            OrderService(db_session).update_order_status(order.id, "READY", admin_user.id, Roles.ADMIN)


class TestUnassign:

    def test_assignee_unassigns(self, db_session, order, worker_user):
        service = OrderService(db_session)
        service.assign_order_to_user(order.id, worker_user.id)

        released = service.unassign_order(order.id, worker_user.id)

        assert released.assigned_worker_id is None
        assert released.assigned_at is None
        assert outbox_types(db_session)[-1] == ORDER_UNASSIGNED

    def test_other_worker_cannot_unassign(self, db_session, order, worker_user, other_worker):
        service = OrderService(db_session)
        service.assign_order_to_user(order.id, worker_user.id)

        with pytest.raises(ForbiddenError) as exc:
            service.unassign_order(order.id, other_worker.id)
        assert exc.value.detail == "Only the assigned worker can unassign this order."

    def test_admin_cannot_unassign_someone_elses_order(self, db_session, order, worker_user, admin_user):
        service = OrderService(db_session)
        service.assign_order_to_user(order.id, worker_user.id)

        with pytest.raises(ForbiddenError):
            service.unassign_order(order.id, admin_user.id, Roles.ADMIN)

    def test_unassign_unassigned_order(self, db_session, order, worker_user):
        released = OrderService(db_session).unassign_order(order.id, worker_user.id)
        assert released.assigned_worker_id is None

    def test_released_order_can_be_claimed_again(self, db_session, order, worker_user, other_worker):
        service = OrderService(db_session)
        service.assign_order_to_user(order.id, worker_user.id)
        service.unassign_order(order.id, worker_user.id)

        claimed = service.assign_order_to_user(order.id, other_worker.id)
        assert claimed.assigned_worker_id == other_worker.id
