"""Read side of a user's daily streak."""
from datetime import datetime
from typing import Optional

from oomf.domain.common.errors import NotFoundError
from oomf.domain.scoring.repositories import ScoringSink
from oomf.domain.scoring.streaks import StreakStatus


class StreakService:
    def __init__(self, scoring: ScoringSink):
        self.scoring = scoring

    async def get_status(self, user_id: str, now: Optional[datetime] = None) -> StreakStatus:
        status = await self.scoring.get_streak_status(user_id, (now or datetime.utcnow()).date())
        if status is None:
            raise NotFoundError("User", user_id)
        return status
