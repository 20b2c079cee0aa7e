"""
Popup session model: a time-boxed selling window.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK, utcnow


class PopupSession(Base):
    """
    A selling window such as "Friday Night 7-10pm".

    At most one row has is_active = true. Orders reference the session
    they were placed in and are never moved to another one.
    """

    __tablename__ = "popup_session"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"<PopupSession(id={self.id}, name='{self.name}', {state})>"
