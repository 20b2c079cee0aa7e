"""
Shared Pydantic schemas used across the application.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, EmailStr

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["OWNER", "ADMIN", "WORKER"]
OrderStatusValue = Literal["PENDING", "MAKING", "READY"]
RemovalReasonValue = Literal["NOT_FOUND", "INACTIVE"]


# =============================================================================
# Authentication Schemas
# =============================================================================


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SignupRequest(BaseModel):
    """Invite redemption."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    password: str = Field(min_length=Limits.MIN_PASSWORD_LENGTH, max_length=128)
    invite_code: str = Field(min_length=1, max_length=64)


class UserOutput(BaseModel):
    id: int
    email: str
    role: Role
    name: str


class AuthResponse(BaseModel):
    """Login and signup response with the staff JWT."""

    token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: UserOutput


class UpdateProfileRequest(BaseModel):
    name: str = Field(max_length=Limits.MAX_NAME_LENGTH)


class UserResponse(BaseModel):
    user: UserOutput


# =============================================================================
# Session Schemas
# =============================================================================


class SessionOutput(BaseModel):
    id: int
    name: str
    is_active: bool
    created_at: datetime


class SessionCreate(BaseModel):
    name: str = Field(max_length=Limits.MAX_NAME_LENGTH)


class SessionResponse(BaseModel):
    session: SessionOutput


class SessionListResponse(BaseModel):
    sessions: list[SessionOutput]


class ActiveSessionResponse(BaseModel):
    """Public stand status: open=False and session=None while the stand is closed."""

    open: bool
    session: SessionOutput | None = None


# =============================================================================
# Menu Schemas
# =============================================================================


class Badge(BaseModel):
    label: str
    color: str


class MenuItemOutput(BaseModel):
    id: int
    name: str
    price_cents: int
    image_url: str | None = None
    image_placeholder_url: str | None = None
    badges: list[Badge] | None = None
    is_active: bool
    sort_order: int
    created_at: datetime


class MenuItemCreate(BaseModel):
    name: str = Field(max_length=Limits.MAX_NAME_LENGTH)
    price_cents: int = Field(ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    image_url: str | None = None
    image_placeholder_url: str | None = None
    badges: list[Badge] | None = None
    is_active: bool = True


class MenuItemUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    price_cents: int | None = Field(default=None, ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    image_url: str | None = None
    image_placeholder_url: str | None = None
    badges: list[Badge] | None = None
    is_active: bool | None = None


class MenuReorderRequest(BaseModel):
    ids: list[int]


class MenuItemResponse(BaseModel):
    item: MenuItemOutput


class MenuItemListResponse(BaseModel):
    items: list[MenuItemOutput]


class PublicMenuResponse(BaseModel):
    session: SessionOutput | None = None
    items: list[MenuItemOutput]


# =============================================================================
# Cart Schemas
# =============================================================================


class CartLine(BaseModel):
    """A normalized client cart line. Name is display-only."""

    menu_item_id: int
    quantity: int = Field(gt=0)
    name: str | None = None


class ActiveCartLine(BaseModel):
    menu_item_id: int
    name: str
    price_cents: int
    image_url: str | None = None
    image_placeholder_url: str | None = None
    quantity: int


class RemovedCartLine(BaseModel):
    menu_item_id: int
    name: str | None = None
    reason: RemovalReasonValue


class CartRefreshRequest(BaseModel):
    # Raw client lines; malformed ones are dropped at the boundary
    items: list[Any] = Field(default_factory=list, max_length=Limits.MAX_CART_LINES)


class CartRefreshResponse(BaseModel):
    active: list[ActiveCartLine] = Field(default_factory=list)
    removed: list[RemovedCartLine] = Field(default_factory=list)


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemOutput(BaseModel):
    id: int
    menu_item_id: int
    menu_item_name: str | None = None
    quantity: int
    unit_price_cents: int


class OrderOutput(BaseModel):
    id: int
    session_id: int
    customer_name: str
    customer_phone: str | None = None
    status: OrderStatusValue
    assigned_worker_id: int | None = None
    assigned_worker_name: str | None = None
    assigned_at: datetime | None = None
    total_price_cents: int
    created_at: datetime
    updated_at: datetime
    fulfilled_at: datetime | None = None
    items: list[OrderItemOutput] = Field(default_factory=list)


class PlaceOrderRequest(BaseModel):
    customer_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    customer_phone: str | None = Field(default=None, max_length=Limits.MAX_PHONE_LENGTH)
    items: list[Any] = Field(default_factory=list, max_length=Limits.MAX_CART_LINES)


class PlaceOrderResponse(BaseModel):
    order: OrderOutput
    removed: list[RemovedCartLine] = Field(default_factory=list)
    tracking_credential: str


class OrderRejectedResponse(BaseModel):
    """Nothing in the cart survived reconciliation."""

    error: str
    removed: list[RemovedCartLine]


class PublicOrderResponse(BaseModel):
    order: OrderOutput
    tracking_credential: str


class OrderResponse(BaseModel):
    order: OrderOutput


class OrderListResponse(BaseModel):
    orders: list[OrderOutput]


class UpdateOrderStatusRequest(BaseModel):
    # Validated by the service so unknown values map to "Invalid status."
    status: str


# =============================================================================
# Invite Schemas
# =============================================================================


class InviteCreate(BaseModel):
    role: str
    expires_in_hours: int | None = Field(default=None, ge=0, le=24 * 365)


class InviteOutput(BaseModel):
    id: int
    code: str
    role: str
    expires_at: datetime | None = None
    used_at: datetime | None = None
    created_at: datetime


class InviteResponse(BaseModel):
    invite: InviteOutput


# =============================================================================
# Health Schemas
# =============================================================================


class HealthResponse(BaseModel):
    status: str
    service: str


class DependencyHealth(BaseModel):
    status: Literal["healthy", "unhealthy"]
    latency_ms: float | None = None
    error: str | None = None


class DetailedHealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    service: str
    dependencies: dict[str, DependencyHealth]
