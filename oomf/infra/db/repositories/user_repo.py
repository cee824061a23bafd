"""User and scoring repository implementations."""
from datetime import date, datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from oomf.domain.common.errors import InsufficientTokensError, NotFoundError
from oomf.domain.common.types import generate_id
from oomf.domain.scoring.models import (
    PublicProfile,
    Stat,
    TokenReason,
    TokenTransaction,
    TransactionCategory,
    UserStats,
)
from oomf.domain.scoring.repositories import ScoringSink
from oomf.domain.scoring.streaks import Streak, StreakStatus, advance_streak, is_at_risk, live_streak, milestones_reached
from oomf.domain.users.models import User
from oomf.domain.users.repositories import UserRepository
from oomf.infra.db.models.token_transaction import TokenTransactionModel
from oomf.infra.db.models.user import StreakMilestoneModel, UserModel


class UserRepositoryImpl(UserRepository):
    """User repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None


class ScoringRepositoryImpl(ScoringSink):
    """Points, counters and token balance on the users row.

    Every mutation is a single conditional UPDATE so concurrent writers never
    lose increments, and nothing here commits.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _column_value(self, user_id: str, column):
        result = await self.session.execute(select(column).where(UserModel.id == user_id))
        return result.scalar_one_or_none()

    async def add_points(self, user_id: str, delta: int) -> None:
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(oomf_score=UserModel.oomf_score + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("User", user_id)

    async def increment_stat(self, user_id: str, stat: Stat) -> int:
        column = getattr(UserModel, stat.value)
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values({column: column + 1})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("User", user_id)
        return await self._column_value(user_id, column)

    async def debit_tokens(
        self,
        user_id: str,
        amount: int,
        reason: TokenReason,
        compliment_id: Optional[str] = None,
    ) -> int:
        if amount <= 0:
            raise ValueError("Debit amount must be positive")
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.tokens >= amount)
            .values(tokens=UserModel.tokens - amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            available = await self._column_value(user_id, UserModel.tokens)
            if available is None:
                raise NotFoundError("User", user_id)
            raise InsufficientTokensError(amount, available)
        await self._record(user_id, TransactionCategory.SPEND, amount, reason, compliment_id)
        return await self._column_value(user_id, UserModel.tokens)

    async def credit_tokens(
        self,
        user_id: str,
        amount: int,
        reason: TokenReason,
        compliment_id: Optional[str] = None,
    ) -> int:
        if amount <= 0:
            raise ValueError("Credit amount must be positive")
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(tokens=UserModel.tokens + amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("User", user_id)
        await self._record(user_id, TransactionCategory.EARN, amount, reason, compliment_id)
        return await self._column_value(user_id, UserModel.tokens)

    async def _record(
        self,
        user_id: str,
        category: TransactionCategory,
        amount: int,
        reason: TokenReason,
        compliment_id: Optional[str],
    ) -> None:
        self.session.add(
            TokenTransactionModel(
                id=generate_id(),
                user_id=user_id,
                category=category,
                amount=amount,
                reason=reason,
                compliment_id=compliment_id,
                created_at=datetime.utcnow(),
            )
        )
        await self.session.flush()

    async def get_stats(self, user_id: str) -> Optional[UserStats]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id).execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_stats() if model else None

    async def get_public_profile(self, user_id: str) -> Optional[PublicProfile]:
        stats = await self.get_stats(user_id)
        return stats.to_public() if stats else None

    async def list_transactions(self, user_id: str, limit: int = 50) -> list[TokenTransaction]:
        result = await self.session.execute(
            select(TokenTransactionModel)
            .where(TokenTransactionModel.user_id == user_id)
            .order_by(TokenTransactionModel.created_at.desc())
            .limit(limit)
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def record_activity(self, user_id: str, today: date) -> Streak:
        result = await self.session.execute(
            select(UserModel)
            .where(UserModel.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        if model is None:
            raise NotFoundError("User", user_id)
        before = model.to_streak()
        streak = advance_streak(before, today)
        if streak == before:
            return streak

        model.streak_current = streak.current
        model.streak_best = streak.best
        model.streak_last_date = streak.last_date
        model.streak_freezes = streak.freezes
        model.streak_freeze_used_date = streak.freeze_used_date
        achieved = set(await self._milestones(user_id))
        for days in milestones_reached(streak.current):
            if days not in achieved:
                self.session.add(
                    StreakMilestoneModel(
                        id=generate_id(),
                        user_id=user_id,
                        milestone_days=days,
                        achieved_at=datetime.utcnow(),
                    )
                )
        await self.session.flush()
        return streak

    async def _milestones(self, user_id: str) -> list[int]:
        result = await self.session.execute(
            select(StreakMilestoneModel.milestone_days)
            .where(StreakMilestoneModel.user_id == user_id)
            .order_by(StreakMilestoneModel.milestone_days)
        )
        return list(result.scalars().all())

    async def get_streak_status(self, user_id: str, today: date) -> Optional[StreakStatus]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id).execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        if model is None:
            return None
        streak = model.to_streak()
        return StreakStatus(
            current=live_streak(streak, today),
            best=streak.best,
            freezes=streak.freezes,
            last_activity_date=streak.last_date,
            is_at_risk=is_at_risk(streak, today),
            milestones=await self._milestones(user_id),
        )
