"""
Low-level publish of one Event to one Redis channel.
"""

from __future__ import annotations

import asyncio
import random

import redis.asyncio as redis

from shared.config.logging import get_logger
from shared.config.settings import settings
from .circuit_breaker import CircuitOpenError, get_event_circuit_breaker
from .event_schema import Event
from .event_types import MAX_EVENT_SIZE

logger = get_logger(__name__)

MAX_BACKOFF_SECONDS = 10.0


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Exponential backoff for 0-indexed `attempt`, jittered, capped at 10s."""
    ceiling = min(base_delay * (2 ** attempt), MAX_BACKOFF_SECONDS)
    return random.uniform(base_delay, max(base_delay, ceiling))


async def publish_event(redis_client: redis.Redis, channel: str, event: Event) -> int:
    """
    Publish with retries.

    Returns the subscriber count Redis reports.

    Raises:
        ValueError: The serialized event exceeds MAX_EVENT_SIZE.
        CircuitOpenError: Redis failed recently and publishing is paused.
        redis.RedisError | OSError: Every attempt failed.
    """
    message = event.to_json()
    size = len(message.encode("utf-8"))
    if size > MAX_EVENT_SIZE:
        raise ValueError(f"Event {event.type} is {size} bytes, limit is {MAX_EVENT_SIZE}")

    breaker = get_event_circuit_breaker()
    if not breaker.can_execute():
        raise CircuitOpenError(f"Circuit open, {event.type} not sent to {channel}")

    attempts = max(settings.redis_publish_max_retries, 1)
    for attempt in range(attempts):
        try:
            receivers = await redis_client.publish(channel, message)
        except (redis.RedisError, OSError) as e:
            if attempt == attempts - 1:
                breaker.record_failure()
                logger.error(
                    "Publish failed",
                    channel=channel,
                    event_type=event.type,
                    attempts=attempts,
                    error=str(e),
                )
                raise
            delay = backoff_delay(attempt, settings.redis_publish_retry_delay)
            logger.warning(
                "Publish failed, retrying",
                channel=channel,
                attempt=attempt + 1,
                delay_seconds=round(delay, 2),
                error=str(e),
            )
            await asyncio.sleep(delay)
        else:
            breaker.record_success()
            return receivers
    return 0
