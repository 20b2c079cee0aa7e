"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, BigIntPK, utcnow

if TYPE_CHECKING:
    from .menu import MenuItem
    from .user import User


class Order(Base):
    """
    A customer order placed during a popup session.

    total_price_cents is fixed at creation. Orders are never deleted.
    tracking_token is the opaque secret behind the customer's tracking
    credential.
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    session_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("popup_session.id"), nullable=False, index=True
    )
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, default="PENDING", nullable=False, index=True)
    assigned_worker_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("app_user.id", ondelete="SET NULL"), index=True
    )
    assigned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    total_price_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tracking_token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    fulfilled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'MAKING', 'READY')", name="chk_order_status_valid"
        ),
        CheckConstraint("total_price_cents >= 0", name="chk_order_total_non_negative"),
        # Staff queue: orders of one session, oldest first
        Index("ix_order_session_created", "session_id", "created_at"),
    )

    # Relationships
    assigned_worker: Mapped[Optional["User"]] = relationship(lazy="joined")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status='{self.status}', session_id={self.session_id})>"


class OrderItem(Base):
    """
    One line of an order with the unit price at order time.
    Immutable once created.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("customer_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("menu_item.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_quantity_positive"),
        CheckConstraint("unit_price_cents >= 0", name="chk_order_item_price_non_negative"),
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, menu_item_id={self.menu_item_id}, qty={self.quantity})>"
