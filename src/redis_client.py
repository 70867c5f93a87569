"""
Redis connection shared by the API workers for cross-process task locks.
Redis is optional: without REDIS_HOST every lock stays process-local.
"""

from typing import Optional

import redis.asyncio as redis

from config import Settings, settings

_client: Optional[redis.Redis] = None


def build_redis(config: Settings) -> redis.Redis:
    return redis.Redis.from_url(
        config.redis_url,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
    )


def get_redis() -> Optional[redis.Redis]:
    """Process-wide Redis client, or None when Redis is not configured."""
    global _client
    if not settings.redis_enabled:
        return None
    if _client is None:
        _client = build_redis(settings)
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
