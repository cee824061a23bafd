"""Redis message bus."""
from typing import Optional

import redis.asyncio as redis

from oomf.settings import settings


class RedisBus:
    """Redis connection for rate-limit counters."""

    def __init__(self, url: Optional[str] = None):
        self._url = url
        self._redis: Optional[redis.Redis] = None

    async def connect(self):
        """Connect to Redis."""
        self._redis = await redis.from_url(self._url or settings.redis_url, decode_responses=True)

    async def disconnect(self):
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def _client(self) -> redis.Redis:
        if not self._redis:
            await self.connect()
        return self._redis

    async def increment_rate_limit(self, key: str, ttl: int) -> int:
        """Increment rate limit counter; the first hit in a window starts its TTL."""
        client = await self._client()
        count = await client.incr(key)
        if count == 1:
            await client.expire(key, ttl)
        return count

    async def decrement_rate_limit(self, key: str) -> None:
        """Undo one increment; a counter that already expired stays gone."""
        client = await self._client()
        if await client.decr(key) <= 0:
            await client.delete(key)

    async def get_rate_limit_ttl(self, key: str) -> Optional[int]:
        """Seconds until the counter at ``key`` expires, or None when it has no TTL."""
        client = await self._client()
        ttl = await client.ttl(key)
        return ttl if ttl and ttl > 0 else None


# Global instance
redis_bus = RedisBus()
