"""
Outbox rows: live-update events stored in the same transaction as the
order or session change they describe.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, DateTime, Enum as SQLEnum, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK, utcnow


class OutboxStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


class AggregateType(str, Enum):
    ORDER = "order"
    SESSION = "session"


class OutboxEvent(Base):
    __tablename__ = "outbox_event"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    event_type: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    aggregate_type: Mapped[str] = mapped_column(Text, nullable=False)
    aggregate_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # JSON keyword arguments for the matching publisher
    payload: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[OutboxStatus] = mapped_column(
        SQLEnum(OutboxStatus, name="outbox_status"),
        default=OutboxStatus.PENDING,
        nullable=False,
    )
    retry_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_error: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # The processor's claim query filters on status and orders by created_at
    __table_args__ = (Index("ix_outbox_status_created", "status", "created_at"),)

    def __repr__(self) -> str:
        return f"<OutboxEvent {self.id} {self.event_type} {self.status.value if self.status else None}>"
