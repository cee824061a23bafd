"""API dependencies."""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from oomf.domain.compliments.services import ComplimentService
from oomf.domain.guessing.services import GuessService
from oomf.domain.policy.rate_limit import RateLimitPolicy, build_rules
from oomf.domain.scoring.rules import EconomyRules
from oomf.domain.scoring.services import StreakService
from oomf.domain.secret_admirer.services import SecretAdmirerService
from oomf.domain.tokens.services import TokenService
from oomf.domain.users.models import User
from oomf.infra.db.repositories.compliment_repo import ComplimentRepositoryImpl
from oomf.infra.db.repositories.friendship_repo import FriendshipRepositoryImpl
from oomf.infra.db.repositories.secret_admirer_repo import SecretAdmirerRepositoryImpl
from oomf.infra.db.repositories.user_repo import ScoringRepositoryImpl, UserRepositoryImpl
from oomf.infra.db.session import get_db
from oomf.infra.messaging.rate_limiter import RedisRateLimiter
from oomf.infra.messaging.redis_bus import redis_bus
from oomf.infra.security.jwt import decode_token
from oomf.services.notification_service import NotificationEventPublisher
from oomf.settings import settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if payload is None:
        raise credentials_exception

    user_id: str = payload.get("sub")
    token_type: str = payload.get("type")
    if user_id is None or token_type != "access":
        raise credentials_exception

    user = await UserRepositoryImpl(db).get_by_id(user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return user


def get_economy_rules() -> EconomyRules:
    """Economy numbers from current settings."""
    return EconomyRules(
        guess_limit=settings.guess_limit,
        hint_cost=settings.hint_cost,
        reveal_cost=settings.reveal_cost,
        secret_admirer_cost=settings.secret_admirer_cost,
        exchange_reveal_threshold=settings.exchange_reveal_threshold,
        points_send=settings.points_send,
        points_secret_admirer_send=settings.points_secret_admirer_send,
        points_receive=settings.points_receive,
        points_correct_guess=settings.points_correct_guess,
        send_reward_every=settings.send_reward_every,
        send_reward_tokens=settings.send_reward_tokens,
    )


def get_rate_limit_policy() -> Optional[RateLimitPolicy]:
    """Redis-backed policy, or None when rate limiting is switched off."""
    if not settings.rate_limit_enabled:
        return None
    return RateLimitPolicy(
        RedisRateLimiter(redis_bus),
        build_rules(
            send_compliment_per_day=settings.rate_limit_send_compliment_per_day,
            guesses_per_hour=settings.rate_limit_guesses_per_hour,
            replies_per_hour=settings.rate_limit_secret_admirer_replies_per_hour,
        ),
    )


def get_compliment_service(
    db: AsyncSession = Depends(get_db),
    rate_limit: Optional[RateLimitPolicy] = Depends(get_rate_limit_policy),
    rules: EconomyRules = Depends(get_economy_rules),
) -> ComplimentService:
    return ComplimentService(
        ComplimentRepositoryImpl(db),
        ScoringRepositoryImpl(db),
        FriendshipRepositoryImpl(db),
        SecretAdmirerRepositoryImpl(db),
        db,
        rate_limit=rate_limit,
        events=NotificationEventPublisher(db),
        rules=rules,
    )


def get_guess_service(
    db: AsyncSession = Depends(get_db),
    rate_limit: Optional[RateLimitPolicy] = Depends(get_rate_limit_policy),
    rules: EconomyRules = Depends(get_economy_rules),
) -> GuessService:
    return GuessService(
        ComplimentRepositoryImpl(db),
        ScoringRepositoryImpl(db),
        db,
        rate_limit=rate_limit,
        rules=rules,
    )


def get_token_service(
    db: AsyncSession = Depends(get_db),
    rules: EconomyRules = Depends(get_economy_rules),
) -> TokenService:
    return TokenService(ComplimentRepositoryImpl(db), ScoringRepositoryImpl(db), db, rules=rules)


def get_secret_admirer_service(
    db: AsyncSession = Depends(get_db),
    rate_limit: Optional[RateLimitPolicy] = Depends(get_rate_limit_policy),
    rules: EconomyRules = Depends(get_economy_rules),
) -> SecretAdmirerService:
    return SecretAdmirerService(
        SecretAdmirerRepositoryImpl(db),
        ComplimentRepositoryImpl(db),
        ScoringRepositoryImpl(db),
        db,
        rate_limit=rate_limit,
        events=NotificationEventPublisher(db),
        rules=rules,
    )


def get_streak_service(db: AsyncSession = Depends(get_db)) -> StreakService:
    return StreakService(ScoringRepositoryImpl(db))
