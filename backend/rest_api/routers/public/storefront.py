"""
Public storefront endpoints - no staff authentication.

- /api/public/active-session: is the stand open?
- /api/public/menu-items: orderable menu
- /api/public/cart/refresh: reconcile a client cart
- /api/public/orders: place and track orders
"""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rest_api.services.domain import (
    CartService,
    MenuService,
    OrderService,
    SessionService,
    menu_item_to_output,
    normalize_cart_lines,
    session_to_output,
)
from shared.config.logging import public_logger as logger
from shared.infrastructure.db import get_db
from shared.security.auth import current_tracking_token
from shared.security.rate_limit import limiter, ORDER_PLACEMENT_LIMIT, PUBLIC_READ_LIMIT
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import (
    ActiveSessionResponse,
    CartRefreshRequest,
    CartRefreshResponse,
    OrderRejectedResponse,
    OrderResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    PublicMenuResponse,
    PublicOrderResponse,
)


router = APIRouter(prefix="/api/public", tags=["public"])

MENU_CACHE_CONTROL = "public, max-age=60"
ITEMS_UNAVAILABLE = "Some items are no longer available. Please refresh your cart."


@router.get("/active-session", response_model=ActiveSessionResponse)
@limiter.limit(PUBLIC_READ_LIMIT)
def get_active_session(request: Request, db: Session = Depends(get_db)) -> ActiveSessionResponse:
    """Reports a closed stand as open=False instead of an error."""
    session = SessionService(db).find_active_session()
    if session is None:
        return ActiveSessionResponse(open=False, session=None)
    return ActiveSessionResponse(open=True, session=session_to_output(session))


@router.get("/menu-items", response_model=PublicMenuResponse)
@limiter.limit(PUBLIC_READ_LIMIT)
def get_menu(request: Request, response: Response, db: Session = Depends(get_db)) -> PublicMenuResponse:
    """Active menu items in display order, plus the active session if any."""
    session = SessionService(db).find_active_session()
    items = MenuService(db).get_active_menu_items()

    response.headers["Cache-Control"] = MENU_CACHE_CONTROL
    return PublicMenuResponse(
        session=session_to_output(session) if session else None,
        items=[menu_item_to_output(item) for item in items],
    )


@router.post("/cart/refresh", response_model=CartRefreshResponse)
@limiter.limit(PUBLIC_READ_LIMIT)
def refresh_cart(
    request: Request,
    body: CartRefreshRequest,
    db: Session = Depends(get_db),
) -> CartRefreshResponse:
    """
    Check a client cart against the catalog.

    Malformed lines are dropped silently before reconciliation.
    """
    lines = normalize_cart_lines(body.items)
    return CartService(db).refresh_cart_items(lines)


@router.post(
    "/orders",
    response_model=PlaceOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": OrderRejectedResponse}},
)
@limiter.limit(ORDER_PLACEMENT_LIMIT)
def place_order(
    request: Request,
    body: PlaceOrderRequest,
    db: Session = Depends(get_db),
):
    """
    Place an order in the active session.

    Returns 400 with the removed lines when none of the cart survives
    reconciliation, and 404 when the stand is closed.
    """
    if not body.customer_name or not body.customer_name.strip():
        raise ValidationError("Customer name is required.", field="customer_name")

    lines = normalize_cart_lines(body.items)
    if not lines:
        raise ValidationError("Cart items are required.", raw_lines=len(body.items))

    placed = OrderService(db).create_public_order(
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        lines=lines,
    )

    if placed.order is None:
        logger.info("Order placement rejected", removed=len(placed.removed))
        rejected = OrderRejectedResponse(error=ITEMS_UNAVAILABLE, removed=placed.removed)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=rejected.model_dump(mode="json"),
        )

    return PlaceOrderResponse(
        order=placed.order,
        removed=placed.removed,
        tracking_credential=placed.tracking_credential,
    )


# Declared before /orders/{order_id} so "track" is not parsed as an id
@router.get("/orders/track", response_model=OrderResponse)
@limiter.limit(PUBLIC_READ_LIMIT)
def track_order(
    request: Request,
    tracking_token: str = Depends(current_tracking_token),
    db: Session = Depends(get_db),
) -> OrderResponse:
    """Order view for the holder of a tracking credential (X-Tracking-Token)."""
    return OrderResponse(order=OrderService(db).get_order_by_tracking_token(tracking_token))


@router.get("/orders/{order_id}", response_model=PublicOrderResponse)
@limiter.limit(PUBLIC_READ_LIMIT)
def get_order(
    request: Request,
    order_id: int,
    tracking_token: str = Depends(current_tracking_token),
    db: Session = Depends(get_db),
) -> PublicOrderResponse:
    """
    Order view with a renewed tracking credential.

    Needs the X-Tracking-Token issued for this order; credentials of other
    orders get 404.
    """
    tracked = OrderService(db).get_public_order(order_id, tracking_token)
    return PublicOrderResponse(order=tracked.order, tracking_credential=tracked.tracking_credential)
