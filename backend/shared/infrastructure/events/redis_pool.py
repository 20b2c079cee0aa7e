"""
Shared async Redis client.

One client (with its own connection pool) per process, created on first
use inside the running event loop and closed by the app lifespan or the
CLI when they are done.
"""

from __future__ import annotations

import asyncio

import redis.asyncio as redis

from shared.config.logging import get_logger
from shared.config.settings import REDIS_URL, settings

logger = get_logger(__name__)

_client: redis.Redis | None = None
_client_lock: asyncio.Lock | None = None


async def get_redis_pool() -> redis.Redis:
    """Return the process-wide client, creating it on first call."""
    global _client, _client_lock

    if _client is not None:
        return _client
    if _client_lock is None:
        _client_lock = asyncio.Lock()

    async with _client_lock:
        if _client is None:
            _client = redis.from_url(
                REDIS_URL,
                decode_responses=True,
                max_connections=settings.redis_pool_max_connections,
                socket_connect_timeout=settings.redis_socket_timeout,
                socket_timeout=settings.redis_socket_timeout,
                health_check_interval=30,
            )
            logger.info("Redis client created", max_connections=settings.redis_pool_max_connections)
    return _client


async def check_redis_health() -> bool:
    """PING with the socket timeout; False on any connection problem."""
    try:
        client = await get_redis_pool()
        return bool(await asyncio.wait_for(client.ping(), timeout=settings.redis_socket_timeout))
    except (redis.RedisError, OSError, asyncio.TimeoutError) as e:
        logger.warning("Redis health check failed", error=str(e))
        return False


async def close_redis_pool() -> None:
    global _client, _client_lock

    client, _client = _client, None
    _client_lock = None
    if client is not None:
        await client.aclose()
        logger.info("Redis client closed")
