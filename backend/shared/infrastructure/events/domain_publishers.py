"""
Domain event publishing.

Order events go to the staff queue channel and to the order's own
tracking channel. Session events go to the staff queue and to the public
session channel so the storefront can flip between open and closed.
"""

from __future__ import annotations

from typing import Any

import redis.asyncio as redis

from .channels import channel_order_tracking, channel_public_session, channel_staff_queue
from .event_schema import Event
from .event_types import ORDER_EVENTS, SESSION_EVENTS
from .publisher import publish_event


async def publish_order_event(
    redis_client: redis.Redis,
    event_type: str,
    order_id: int,
    session_id: int,
    tracking_token: str | None,
    status: str,
    assigned_worker_id: int | None = None,
    actor_user_id: int | None = None,
    actor_role: str = "ANON",
) -> None:
    event = Event.for_order(
        event_type,
        order_id=order_id,
        session_id=session_id,
        status=status,
        assigned_worker_id=assigned_worker_id,
        actor_user_id=actor_user_id,
        actor_role=actor_role,
    )
    await publish_event(redis_client, channel_staff_queue(), event)
    if tracking_token:
        await publish_event(redis_client, channel_order_tracking(tracking_token), event)


async def publish_session_event(
    redis_client: redis.Redis,
    event_type: str,
    session_id: int,
    name: str,
    is_active: bool,
    actor_user_id: int | None = None,
    actor_role: str = "ADMIN",
) -> None:
    event = Event.for_session(
        event_type,
        session_id=session_id,
        name=name,
        is_active=is_active,
        actor_user_id=actor_user_id,
        actor_role=actor_role,
    )
    await publish_event(redis_client, channel_staff_queue(), event)
    await publish_event(redis_client, channel_public_session(), event)


async def publish_from_payload(
    redis_client: redis.Redis,
    event_type: str,
    payload: dict[str, Any],
) -> None:
    """Dispatch a stored outbox payload to the matching publisher."""
    if event_type in ORDER_EVENTS:
        await publish_order_event(redis_client, event_type, **payload)
    elif event_type in SESSION_EVENTS:
        await publish_session_event(redis_client, event_type, **payload)
    else:
        raise ValueError(f"Unknown event type: {event_type}")
