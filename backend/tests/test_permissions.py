"""
Tests for the authorization matrix.
"""

from types import SimpleNamespace

import pytest

from rest_api.services.permissions import (
    Action,
    ActorRef,
    AdminStrategy,
    NoAccessStrategy,
    PermissionContext,
    WorkerStrategy,
    can,
    get_strategy,
    require_capability,
)
from shared.config.constants import Roles
from shared.utils.exceptions import ForbiddenError

ADMIN_ONLY = [Action.MANAGE_SESSIONS, Action.MANAGE_MENU, Action.CREATE_INVITE]
STAFF = [
    Action.VIEW_SESSIONS,
    Action.VIEW_MENU,
    Action.VIEW_QUEUE,
    Action.ASSIGN_ORDER,
    Action.UPDATE_ORDER_STATUS,
    Action.UNASSIGN_ORDER,
]


def order_assigned_to(user_id):
    return SimpleNamespace(assigned_worker_id=user_id)


class TestStrategySelection:

    @pytest.mark.parametrize("role,strategy", [
        (Roles.OWNER, AdminStrategy),
        (Roles.ADMIN, AdminStrategy),
        (Roles.WORKER, WorkerStrategy),
        ("CUSTOMER", NoAccessStrategy),
    ])
    def test_get_strategy(self, role, strategy):
        assert isinstance(get_strategy(role), strategy)

    def test_owner_is_admin_class(self):
        assert PermissionContext(ActorRef(1, Roles.OWNER)).is_admin is True
        assert PermissionContext(ActorRef(1, Roles.WORKER)).is_admin is False


class TestCoarseActions:

    @pytest.mark.parametrize("action", ADMIN_ONLY + STAFF)
    @pytest.mark.parametrize("role", [Roles.OWNER, Roles.ADMIN])
    def test_admins_can_do_everything(self, role, action):
        assert can(ActorRef(1, role), action) is True

    @pytest.mark.parametrize("action", STAFF)
    def test_worker_staff_actions(self, action):
        assert can(ActorRef(1, Roles.WORKER), action) is True

    @pytest.mark.parametrize("action", ADMIN_ONLY)
    def test_worker_admin_actions_denied(self, action):
        assert can(ActorRef(1, Roles.WORKER), action) is False
        with pytest.raises(ForbiddenError):
            require_capability(ActorRef(1, Roles.WORKER), action)

    @pytest.mark.parametrize("action", ADMIN_ONLY + STAFF)
    def test_unknown_role_denied(self, action):
        assert can(ActorRef(1, "CUSTOMER"), action) is False


class TestOrderLevelRules:

    def test_status_update_requires_assignee_for_worker(self):
        worker = ActorRef(5, Roles.WORKER)
        assert can(worker, Action.UPDATE_ORDER_STATUS, order_assigned_to(5)) is True
        assert can(worker, Action.UPDATE_ORDER_STATUS, order_assigned_to(6)) is False
        assert can(worker, Action.UPDATE_ORDER_STATUS, order_assigned_to(None)) is False

    @pytest.mark.parametrize("role", [Roles.OWNER, Roles.ADMIN])
    def test_status_update_any_order_for_admins(self, role):
        assert can(ActorRef(1, role), Action.UPDATE_ORDER_STATUS, order_assigned_to(6)) is True
        assert can(ActorRef(1, role), Action.UPDATE_ORDER_STATUS, order_assigned_to(None)) is True

    @pytest.mark.parametrize("role", [Roles.OWNER, Roles.ADMIN, Roles.WORKER])
    def test_unassign_has_no_admin_override(self, role):
        actor = ActorRef(1, role)
        assert can(actor, Action.UNASSIGN_ORDER, order_assigned_to(1)) is True
        assert can(actor, Action.UNASSIGN_ORDER, order_assigned_to(None)) is True
        assert can(actor, Action.UNASSIGN_ORDER, order_assigned_to(2)) is False

    def test_denial_messages(self):
        worker = ActorRef(5, Roles.WORKER)
        with pytest.raises(ForbiddenError) as exc:
            require_capability(worker, Action.UPDATE_ORDER_STATUS, order_assigned_to(6))
        assert exc.value.detail == "You are not assigned to this order."

        with pytest.raises(ForbiddenError) as exc:
            require_capability(worker, Action.UNASSIGN_ORDER, order_assigned_to(6))
        assert exc.value.detail == "Only the assigned worker can unassign this order."
