"""
Event Services - transactional outbox for live order updates.

- outbox_service: write events in the business transaction
- outbox_processor: publish stored events to Redis
"""

from .outbox_service import (
    write_outbox_event,
    write_order_outbox_event,
    write_session_outbox_event,
)

from .outbox_processor import (
    OutboxProcessor,
    get_outbox_processor,
    start_outbox_processor,
    stop_outbox_processor,
    process_pending_events_once,
)

__all__ = [
    "write_outbox_event",
    "write_order_outbox_event",
    "write_session_outbox_event",
    "OutboxProcessor",
    "get_outbox_processor",
    "start_outbox_processor",
    "stop_outbox_processor",
    "process_pending_events_once",
]
