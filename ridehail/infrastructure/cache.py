"""
Cache-aside store for paginated list responses.

Each logical list (``user_7_cars``, ``driver_3_reviews``) is one Redis hash
whose fields are page numbers and whose values are the JSON-encoded pages.
Invalidating the key drops every cached page at once.
Writers commit before they invalidate.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


def cars_key(owner_id: int) -> str:
    return f"user_{owner_id}_cars"


def reviews_key(driver_id: int) -> str:
    return f"driver_{driver_id}_reviews"


class ListCache:
    def __init__(self, client: aioredis.Redis, ttl_seconds: int = 60):
        self.redis = client
        self.ttl = ttl_seconds

    async def get(self, key: str, page: int = 1) -> Optional[dict[str, Any]]:
        raw = await self.redis.hget(key, str(page))
        if raw is None:
            logger.debug("Cache miss %s page=%d", key, page)
            return None
        logger.debug("Cache hit %s page=%d", key, page)
        return json.loads(raw)

    async def set(self, key: str, page: int, value: dict[str, Any]) -> None:
        """Store one page; the expiry applies to the whole list."""
        await self.redis.hset(key, str(page), json.dumps(value, default=str))
        await self.redis.expire(key, self.ttl)

    async def invalidate(self, key: str) -> None:
        await self.redis.delete(key)
        logger.debug("Cache invalidated %s", key)
