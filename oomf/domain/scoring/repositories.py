"""Scoring sink protocol.

Implementations must join the caller's open transaction: nothing they do may
commit, so a debit or point award rolls back together with the state change it
accompanies.
"""
from datetime import date
from typing import Optional, Protocol

from oomf.domain.scoring.models import (
    PublicProfile,
    Stat,
    TokenReason,
    TokenTransaction,
    UserStats,
)
from oomf.domain.scoring.streaks import Streak, StreakStatus


class ScoringSink(Protocol):
    """Point, stat and token mutations on user records."""

    async def add_points(self, user_id: str, delta: int) -> None:
        ...

    async def increment_stat(self, user_id: str, stat: Stat) -> int:
        """Increment a counter and return its new value."""
        ...

    async def debit_tokens(
        self,
        user_id: str,
        amount: int,
        reason: TokenReason,
        compliment_id: Optional[str] = None,
    ) -> int:
        """Debit tokens and return the new balance. Raises InsufficientTokensError."""
        ...

    async def credit_tokens(
        self,
        user_id: str,
        amount: int,
        reason: TokenReason,
        compliment_id: Optional[str] = None,
    ) -> int:
        ...

    async def get_stats(self, user_id: str) -> Optional[UserStats]:
        ...

    async def get_public_profile(self, user_id: str) -> Optional[PublicProfile]:
        ...

    async def list_transactions(self, user_id: str, limit: int = 50) -> list[TokenTransaction]:
        ...

    async def record_activity(self, user_id: str, today: date) -> Streak:
        """Advance the user's daily streak for ``today`` and record new milestones."""
        ...

    async def get_streak_status(self, user_id: str, today: date) -> Optional[StreakStatus]:
        ...
