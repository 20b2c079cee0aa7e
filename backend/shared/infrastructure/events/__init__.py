"""
Live order updates over Redis pub/sub.

Services never publish directly: they write outbox rows, and the outbox
processor calls publish_from_payload() once the transaction committed.

Channels:
    popup:queue            every order and session event (staff dashboards)
    popup:order:<token>    events of one order (customer tracking page)
    popup:session          session opened/closed (storefront)
"""

from .circuit_breaker import (
    CircuitOpenError,
    CircuitState,
    EventCircuitBreaker,
    get_event_circuit_breaker,
)
from .event_types import (
    ORDER_CREATED,
    ORDER_ASSIGNED,
    ORDER_UNASSIGNED,
    ORDER_STATUS_CHANGED,
    ORDER_EVENTS,
    SESSION_ACTIVATED,
    SESSION_CLOSED,
    SESSION_EVENTS,
    MAX_EVENT_SIZE,
)
from .event_schema import Event
from .channels import channel_staff_queue, channel_order_tracking, channel_public_session
from .redis_pool import get_redis_pool, check_redis_health, close_redis_pool
from .publisher import publish_event, backoff_delay
from .domain_publishers import publish_order_event, publish_session_event, publish_from_payload

__all__ = [
    "CircuitOpenError",
    "CircuitState",
    "EventCircuitBreaker",
    "get_event_circuit_breaker",
    "ORDER_CREATED",
    "ORDER_ASSIGNED",
    "ORDER_UNASSIGNED",
    "ORDER_STATUS_CHANGED",
    "ORDER_EVENTS",
    "SESSION_ACTIVATED",
    "SESSION_CLOSED",
    "SESSION_EVENTS",
    "MAX_EVENT_SIZE",
    "Event",
    "channel_staff_queue",
    "channel_order_tracking",
    "channel_public_session",
    "get_redis_pool",
    "check_redis_health",
    "close_redis_pool",
    "publish_event",
    "backoff_delay",
    "publish_order_event",
    "publish_session_event",
    "publish_from_payload",
]
