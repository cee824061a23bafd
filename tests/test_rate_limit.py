"""Tests for the rate-limit policy and the Redis-backed limiter."""
import pytest

from oomf.domain.common.errors import RateLimitedError
from oomf.domain.policy.rate_limit import RateLimitAction, RateLimitPolicy, RateLimitRule, build_rules
from oomf.infra.messaging.rate_limiter import RedisRateLimiter

from tests.conftest import FakeRateLimiter


class FakeBus:
    """Stands in for RedisBus counters."""

    def __init__(self, ttl=None):
        self.counters: dict[str, int] = {}
        self.expiries: dict[str, int] = {}
        self.ttl = ttl

    async def increment_rate_limit(self, key, ttl):
        self.counters[key] = self.counters.get(key, 0) + 1
        if self.counters[key] == 1:
            self.expiries[key] = ttl
        return self.counters[key]

    async def decrement_rate_limit(self, key):
        self.counters[key] -= 1
        if self.counters[key] <= 0:
            del self.counters[key]

    async def get_rate_limit_ttl(self, key):
        return self.ttl


def test_build_rules_windows():
    rules = build_rules(send_compliment_per_day=10, guesses_per_hour=100, replies_per_hour=60)
    assert rules[RateLimitAction.SEND_COMPLIMENT] == RateLimitRule(10, 86400)
    assert rules[RateLimitAction.GUESS] == RateLimitRule(100, 3600)
    assert rules[RateLimitAction.SECRET_ADMIRER_REPLY] == RateLimitRule(60, 3600)


async def test_policy_counts_per_user_and_action():
    limiter = FakeRateLimiter()
    policy = RateLimitPolicy(limiter, {RateLimitAction.GUESS: RateLimitRule(1, 3600)})

    await policy.enforce(RateLimitAction.GUESS, "u1")
    await policy.enforce(RateLimitAction.GUESS, "u2")
    with pytest.raises(RateLimitedError) as exc_info:
        await policy.enforce(RateLimitAction.GUESS, "u1")

    assert exc_info.value.action == "guess"
    assert exc_info.value.retry_after == 3600
    assert set(limiter.counts) == {"oomf_rl:guess:u1", "oomf_rl:guess:u2"}


async def test_action_without_rule_is_allowed():
    policy = RateLimitPolicy(FakeRateLimiter(), {})
    decision = await policy.check(RateLimitAction.SEND_COMPLIMENT, "u1")
    assert decision.allowed is True


async def test_redis_limiter_reports_remaining_window():
    bus = FakeBus(ttl=1200)
    limiter = RedisRateLimiter(bus)

    first = await limiter.check_rate_limit("k", max_requests=2, window_seconds=3600)
    second = await limiter.check_rate_limit("k", max_requests=2, window_seconds=3600)
    third = await limiter.check_rate_limit("k", max_requests=2, window_seconds=3600)

    assert first.allowed and second.allowed
    assert third.allowed is False
    assert third.retry_after == 1200
    assert bus.expiries == {"k": 3600}


async def test_redis_limiter_falls_back_to_window_without_ttl():
    limiter = RedisRateLimiter(FakeBus(ttl=None))
    await limiter.check_rate_limit("k", max_requests=0, window_seconds=60)
    decision = await limiter.check_rate_limit("k", max_requests=0, window_seconds=60)
    assert decision.retry_after == 60


async def test_release_gives_back_one_request():
    limiter = FakeRateLimiter()
    policy = RateLimitPolicy(limiter, {RateLimitAction.GUESS: RateLimitRule(1, 3600)})

    await policy.enforce(RateLimitAction.GUESS, "u1")
    await policy.release(RateLimitAction.GUESS, "u1")
    await policy.enforce(RateLimitAction.GUESS, "u1")

    assert limiter.counts == {"oomf_rl:guess:u1": 1}


async def test_release_without_rule_is_a_no_op():
    limiter = FakeRateLimiter()
    await RateLimitPolicy(limiter, {}).release(RateLimitAction.GUESS, "u1")
    assert limiter.counts == {}


async def test_redis_limiter_release_drops_emptied_counter():
    bus = FakeBus()
    limiter = RedisRateLimiter(bus)

    await limiter.check_rate_limit("k", max_requests=2, window_seconds=3600)
    await limiter.check_rate_limit("k", max_requests=2, window_seconds=3600)
    await limiter.release_rate_limit("k")
    assert bus.counters == {"k": 1}

    await limiter.release_rate_limit("k")
    assert bus.counters == {}
