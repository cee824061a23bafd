"""Daily sending streak routes."""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from oomf.api.deps import get_current_user, get_streak_service
from oomf.domain.scoring.services import StreakService
from oomf.domain.users.models import User

router = APIRouter()


class StreakResponse(BaseModel):
    current_streak: int
    best_streak: int
    freezes_available: int
    last_activity_date: Optional[date] = None
    is_at_risk: bool
    milestones: List[int]


@router.get("/me", response_model=StreakResponse)
async def get_my_streak(
    current_user: User = Depends(get_current_user),
    service: StreakService = Depends(get_streak_service),
):
    """Current streak, best streak and milestones reached so far."""
    status = await service.get_status(current_user.id)
    return StreakResponse(
        current_streak=status.current,
        best_streak=status.best,
        freezes_available=status.freezes,
        last_activity_date=status.last_activity_date,
        is_at_risk=status.is_at_risk,
        milestones=status.milestones,
    )
