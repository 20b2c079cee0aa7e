"""
Staff order queue.

Any staff member may list the queue and claim orders. Status changes
and releases are further restricted per order by the permission policy.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers._common import require_action
from rest_api.services.domain import OrderService
from rest_api.services.permissions import Action
from shared.infrastructure.db import get_db
from shared.security.auth import Principal
from shared.utils.exceptions import NoActiveSessionError, ValidationError
from shared.utils.schemas import OrderListResponse, OrderResponse, UpdateOrderStatusRequest


router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("/active", response_model=OrderListResponse)
def list_active_orders(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.VIEW_QUEUE)),
) -> OrderListResponse:
    """Orders of the active session, oldest first. 400 while the stand is closed."""
    try:
        orders = OrderService(db).list_active_session_orders()
    except NoActiveSessionError:
        raise ValidationError("No active session.", user_id=principal.id)
    return OrderListResponse(orders=orders)


@router.post("/{order_id}/assign", response_model=OrderResponse)
def assign_order(
    order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.ASSIGN_ORDER)),
) -> OrderResponse:
    """Claim an order. 409 when someone else holds it."""
    order = OrderService(db).assign_order_to_user(order_id, principal.id, principal.role)
    return OrderResponse(order=order)


@router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.UPDATE_ORDER_STATUS)),
) -> OrderResponse:
    order = OrderService(db).update_order_status(
        order_id, body.status, principal.id, principal.role
    )
    return OrderResponse(order=order)


@router.post("/{order_id}/unassign", response_model=OrderResponse)
def unassign_order(
    order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.UNASSIGN_ORDER)),
) -> OrderResponse:
    order = OrderService(db).unassign_order(order_id, principal.id, principal.role)
    return OrderResponse(order=order)
