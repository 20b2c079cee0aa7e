"""
Event Type Constants.

Defines all event types published on the live-update channel.
"""

# =============================================================================
# Order lifecycle events
# =============================================================================

ORDER_CREATED = "ORDER_CREATED"
ORDER_ASSIGNED = "ORDER_ASSIGNED"
ORDER_UNASSIGNED = "ORDER_UNASSIGNED"
ORDER_STATUS_CHANGED = "ORDER_STATUS_CHANGED"

ORDER_EVENTS = frozenset({
    ORDER_CREATED,
    ORDER_ASSIGNED,
    ORDER_UNASSIGNED,
    ORDER_STATUS_CHANGED,
})

# =============================================================================
# Session events
# =============================================================================

SESSION_ACTIVATED = "SESSION_ACTIVATED"
SESSION_CLOSED = "SESSION_CLOSED"

SESSION_EVENTS = frozenset({SESSION_ACTIVATED, SESSION_CLOSED})

# =============================================================================
# Size limits
# =============================================================================

# Redis messages above this size are rejected before publishing
MAX_EVENT_SIZE = 64 * 1024  # 64 KB
