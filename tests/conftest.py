"""Pytest configuration: in-memory SQLite database and engine services."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from oomf.domain.common.types import generate_id
from oomf.domain.compliments.services import ComplimentService
from oomf.domain.guessing.services import GuessService
from oomf.domain.policy.rate_limit import RateLimitDecision, RateLimitPolicy
from oomf.domain.secret_admirer.services import SecretAdmirerService
from oomf.domain.tokens.services import TokenService
from oomf.infra.db.base import Base
from oomf.infra.db import models  # noqa: F401
from oomf.infra.db.models.friendship import BlockedUserModel, FriendshipModel, FriendshipStatus
from oomf.infra.db.models.template import TemplateModel
from oomf.infra.db.models.user import UserModel
from oomf.infra.db.repositories.compliment_repo import ComplimentRepositoryImpl
from oomf.infra.db.repositories.friendship_repo import FriendshipRepositoryImpl
from oomf.infra.db.repositories.secret_admirer_repo import SecretAdmirerRepositoryImpl
from oomf.infra.db.repositories.user_repo import ScoringRepositoryImpl


class FakeEventPublisher:
    """Collects events instead of delivering them."""

    def __init__(self):
        self.sent: list[tuple] = []

    async def send(self, user_id, event_type, payload):
        self.sent.append((user_id, event_type, payload))

    def for_user(self, user_id):
        return [(event_type, payload) for uid, event_type, payload in self.sent if uid == user_id]


class FakeRateLimiter:
    """In-memory fixed window; counts never expire."""

    def __init__(self):
        self.counts: dict[str, int] = {}

    async def check_rate_limit(self, key, max_requests, window_seconds):
        self.counts[key] = self.counts.get(key, 0) + 1
        if self.counts[key] <= max_requests:
            return RateLimitDecision(allowed=True)
        return RateLimitDecision(allowed=False, retry_after=window_seconds)

    async def release_rate_limit(self, key):
        self.counts[key] = max(0, self.counts.get(key, 0) - 1)


@dataclass
class EngineServices:
    compliments: ComplimentService
    guessing: GuessService
    tokens: TokenService
    secret_admirer: SecretAdmirerService
    events: FakeEventPublisher


def build_services(
    session: AsyncSession,
    events: Optional[FakeEventPublisher] = None,
    rate_limit: Optional[RateLimitPolicy] = None,
) -> EngineServices:
    events = events or FakeEventPublisher()
    compliments_repo = ComplimentRepositoryImpl(session)
    scoring = ScoringRepositoryImpl(session)
    chats = SecretAdmirerRepositoryImpl(session)
    return EngineServices(
        compliments=ComplimentService(
            compliments_repo,
            scoring,
            FriendshipRepositoryImpl(session),
            chats,
            session,
            rate_limit=rate_limit,
            events=events,
        ),
        guessing=GuessService(compliments_repo, scoring, session, rate_limit=rate_limit),
        tokens=TokenService(compliments_repo, scoring, session),
        secret_admirer=SecretAdmirerService(
            chats, compliments_repo, scoring, session, rate_limit=rate_limit, events=events
        ),
        events=events,
    )


async def create_user(
    session: AsyncSession,
    username: str,
    tokens: int = 3,
    oomf_score: int = 0,
    created_at: Optional[datetime] = None,
) -> str:
    now = datetime.utcnow()
    user_id = generate_id()
    session.add(
        UserModel(
            id=user_id,
            username=username,
            display_name=username.capitalize(),
            tokens=tokens,
            oomf_score=oomf_score,
            created_at=created_at or now,
            updated_at=now,
        )
    )
    await session.commit()
    return user_id


async def befriend(session: AsyncSession, user_a: str, user_b: str) -> None:
    now = datetime.utcnow()
    session.add(
        FriendshipModel(
            id=generate_id(),
            requester_id=user_a,
            addressee_id=user_b,
            status=FriendshipStatus.ACCEPTED,
            created_at=now,
            updated_at=now,
        )
    )
    await session.commit()


async def block(session: AsyncSession, blocker_id: str, blocked_id: str) -> None:
    session.add(
        BlockedUserModel(
            id=generate_id(),
            blocker_id=blocker_id,
            blocked_id=blocked_id,
            created_at=datetime.utcnow(),
        )
    )
    await session.commit()


async def get_user_row(session: AsyncSession, user_id: str) -> UserModel:
    result = await session.execute(
        select(UserModel).where(UserModel.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def count_rows(session: AsyncSession, model, *criteria) -> int:
    result = await session.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar() or 0


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def alice(db_session):
    """Sender with the default 3 tokens."""
    return await create_user(db_session, "alice")


@pytest.fixture
async def bob(db_session, alice):
    """Receiver; friends with alice."""
    user_id = await create_user(db_session, "bob", tokens=0)
    await befriend(db_session, alice, user_id)
    return user_id


@pytest.fixture
async def carol(db_session, bob):
    """Friend of bob only."""
    user_id = await create_user(db_session, "carol")
    await befriend(db_session, user_id, bob)
    return user_id


@pytest.fixture
async def template(db_session):
    template_id = generate_id()
    db_session.add(
        TemplateModel(
            id=template_id,
            text="You light up every room",
            emoji="✨",
            category="vibes",
            usage_count=0,
            is_active=True,
            created_at=datetime.utcnow(),
        )
    )
    await db_session.commit()
    return template_id


@pytest.fixture
def events():
    return FakeEventPublisher()


@pytest.fixture
def services(db_session, events):
    return build_services(db_session, events=events)
