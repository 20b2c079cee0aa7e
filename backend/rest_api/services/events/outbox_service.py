"""
Queue live-update events inside the caller's transaction.

Services add the event right after the change it describes and commit
both together; nothing here flushes or commits. OutboxProcessor later
hands each payload to publish_from_payload, so payload keys mirror the
publisher keyword arguments.
"""

import json
from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import AggregateType, Order, OutboxEvent, PopupSession
from shared.config.logging import get_logger

logger = get_logger(__name__)


def write_outbox_event(
    db: Session,
    event_type: str,
    aggregate_type: str,
    aggregate_id: int,
    payload: dict[str, Any],
) -> OutboxEvent:
    event = OutboxEvent(
        event_type=event_type,
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
        payload=json.dumps(payload, default=str),
    )
    db.add(event)
    logger.debug("Outbox event queued", event_type=event_type, aggregate_id=aggregate_id)
    return event


def write_order_outbox_event(
    db: Session,
    event_type: str,
    order: Order,
    actor_user_id: int | None = None,
    actor_role: str = "ANON",
) -> OutboxEvent:
    """The order must be flushed so it has an id."""
    return write_outbox_event(
        db,
        event_type,
        AggregateType.ORDER.value,
        order.id,
        {
            "order_id": order.id,
            "session_id": order.session_id,
            "tracking_token": order.tracking_token,
            "status": order.status,
            "assigned_worker_id": order.assigned_worker_id,
            "actor_user_id": actor_user_id,
            "actor_role": actor_role,
        },
    )


def write_session_outbox_event(
    db: Session,
    event_type: str,
    session: PopupSession,
    actor_user_id: int | None = None,
    actor_role: str = "ADMIN",
) -> OutboxEvent:
    return write_outbox_event(
        db,
        event_type,
        AggregateType.SESSION.value,
        session.id,
        {
            "session_id": session.id,
            "name": session.name,
            "is_active": session.is_active,
            "actor_user_id": actor_user_id,
            "actor_role": actor_role,
        },
    )
