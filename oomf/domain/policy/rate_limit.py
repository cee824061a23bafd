"""Rate limiting policy for engine actions."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol
import logging

from oomf.domain.common.errors import RateLimitedError

logger = logging.getLogger(__name__)


class RateLimitAction(str, Enum):
    """Actions guarded by the policy."""
    SEND_COMPLIMENT = "send_compliment"
    GUESS = "guess"
    SECRET_ADMIRER_REPLY = "secret_admirer_reply"


@dataclass(frozen=True)
class RateLimitRule:
    max_requests: int
    window_seconds: int


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: Optional[int] = None  # seconds until the window resets


class RateLimiter(Protocol):
    """Rate limiter protocol."""

    async def check_rate_limit(
        self, key: str, max_requests: int, window_seconds: int
    ) -> RateLimitDecision:
        """
        Count one request against ``key`` and decide whether it is allowed.
        """
        ...

    async def release_rate_limit(self, key: str) -> None:
        """Give back one request counted against ``key``."""
        ...


class RateLimitPolicy:
    """Maps actions to rules and asks the limiter."""

    def __init__(self, limiter: RateLimiter, rules: dict[RateLimitAction, RateLimitRule]):
        self.limiter = limiter
        self.rules = rules

    async def check(self, action: RateLimitAction, user_id: str) -> RateLimitDecision:
        rule = self.rules.get(action)
        if rule is None:
            return RateLimitDecision(allowed=True)
        key = f"oomf_rl:{action.value}:{user_id}"
        return await self.limiter.check_rate_limit(key, rule.max_requests, rule.window_seconds)

    async def enforce(self, action: RateLimitAction, user_id: str) -> None:
        decision = await self.check(action, user_id)
        if not decision.allowed:
            logger.info("Rate limited %s for user %s (retry after %s)", action.value, user_id, decision.retry_after)
            raise RateLimitedError(action.value, decision.retry_after)

    async def release(self, action: RateLimitAction, user_id: str) -> None:
        """Refund a request whose operation was rejected before it committed."""
        if action in self.rules:
            await self.limiter.release_rate_limit(f"oomf_rl:{action.value}:{user_id}")


def build_rules(
    send_compliment_per_day: int,
    guesses_per_hour: int,
    replies_per_hour: int,
) -> dict[RateLimitAction, RateLimitRule]:
    """Rules from settings values."""
    return {
        RateLimitAction.SEND_COMPLIMENT: RateLimitRule(send_compliment_per_day, 24 * 60 * 60),
        RateLimitAction.GUESS: RateLimitRule(guesses_per_hour, 60 * 60),
        RateLimitAction.SECRET_ADMIRER_REPLY: RateLimitRule(replies_per_hour, 60 * 60),
    }
