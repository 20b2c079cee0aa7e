"""
Menu catalog model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK, JSONType, utcnow


class MenuItem(Base):
    """
    An orderable drink or snack.

    price_cents is the current price; order lines keep their own snapshot.
    sort_order is the display rank on the public menu (lower first).
    """

    __tablename__ = "menu_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    image_placeholder_url: Mapped[Optional[str]] = mapped_column(Text)
    # [{"label": "New", "color": "#22c55e"}, ...]
    badges: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSONType)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="chk_menu_item_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, name='{self.name}', price_cents={self.price_cents})>"
