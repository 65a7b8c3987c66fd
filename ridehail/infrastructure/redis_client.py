"""Redis connection pool backing the list caches; created on first use."""

from __future__ import annotations

from typing import Optional

import redis.asyncio as aioredis

from ridehail.config import settings

_pool: Optional[aioredis.ConnectionPool] = None


def _connection_pool() -> aioredis.ConnectionPool:
    global _pool
    if _pool is None:
        _pool = aioredis.ConnectionPool.from_url(
            settings.redis_url, decode_responses=True
        )
    return _pool


async def get_redis() -> aioredis.Redis:
    return aioredis.Redis(connection_pool=_connection_pool())


async def close_redis() -> None:
    """Drop every pooled connection (app shutdown)."""
    global _pool
    if _pool is not None:
        await _pool.disconnect()
        _pool = None
