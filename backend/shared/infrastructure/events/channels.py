"""
Redis Channel Naming.
"""

from __future__ import annotations

CHANNEL_PREFIX = "popup"


def channel_staff_queue() -> str:
    """Channel every staff client subscribes to for queue updates."""
    return f"{CHANNEL_PREFIX}:queue"


def channel_order_tracking(tracking_token: str) -> str:
    """Channel a customer subscribes to with their tracking credential."""
    if not tracking_token or not isinstance(tracking_token, str):
        raise ValueError("tracking_token must be a non-empty string")
    return f"{CHANNEL_PREFIX}:order:{tracking_token}"


def channel_public_session() -> str:
    """Channel announcing the stand opening and closing."""
    return f"{CHANNEL_PREFIX}:session"
