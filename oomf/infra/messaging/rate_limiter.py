"""Fixed-window rate limiter on Redis counters."""
import logging

from oomf.domain.policy.rate_limit import RateLimitDecision, RateLimiter
from oomf.infra.messaging.redis_bus import RedisBus

logger = logging.getLogger(__name__)


class RedisRateLimiter(RateLimiter):
    """Counts requests per key in a window that starts with the first request."""

    def __init__(self, bus: RedisBus):
        self.bus = bus

    async def check_rate_limit(self, key: str, max_requests: int, window_seconds: int) -> RateLimitDecision:
        count = await self.bus.increment_rate_limit(key, window_seconds)
        if count <= max_requests:
            return RateLimitDecision(allowed=True)
        retry_after = await self.bus.get_rate_limit_ttl(key) or window_seconds
        logger.debug("Rate limit hit for %s (%s/%s)", key, count, max_requests)
        return RateLimitDecision(allowed=False, retry_after=retry_after)

    async def release_rate_limit(self, key: str) -> None:
        await self.bus.decrement_rate_limit(key)
