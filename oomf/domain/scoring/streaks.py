"""Daily sending streaks.

A streak counts consecutive calendar days (UTC) on which the user sent at
least one compliment. Missing exactly one day is forgiven once per freeze.
"""
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Optional

STREAK_MILESTONES = (3, 7, 14, 30, 60, 100, 365)


@dataclass(frozen=True)
class Streak:
    current: int = 0
    best: int = 0
    last_date: Optional[date] = None
    freezes: int = 0
    freeze_used_date: Optional[date] = None


@dataclass
class StreakStatus:
    current: int
    best: int
    freezes: int
    last_activity_date: Optional[date]
    is_at_risk: bool  # the streak ends unless the user sends today
    milestones: list[int] = field(default_factory=list)


def advance_streak(streak: Streak, today: date) -> Streak:
    """Streak after an activity on ``today``; unchanged if already active today."""
    if streak.last_date == today:
        return streak
    yesterday = today - timedelta(days=1)
    if streak.last_date == yesterday:
        return _extend(streak, streak.current + 1, today)
    freeze_available = streak.freezes > 0 and (
        streak.freeze_used_date is None or streak.freeze_used_date < yesterday
    )
    if streak.last_date == today - timedelta(days=2) and freeze_available:
        frozen = replace(streak, freezes=streak.freezes - 1, freeze_used_date=today)
        return _extend(frozen, streak.current + 1, today)
    return _extend(streak, 1, today)


def _extend(streak: Streak, current: int, today: date) -> Streak:
    return replace(streak, current=current, best=max(streak.best, current), last_date=today)


def milestones_reached(current: int) -> list[int]:
    return [days for days in STREAK_MILESTONES if current >= days]


def live_streak(streak: Streak, today: date) -> int:
    """Current length as of ``today``; 0 once a missed day can no longer be saved."""
    if streak.last_date is None:
        return 0
    if streak.last_date == today or advance_streak(streak, today).current > 1:
        return streak.current
    return 0


def is_at_risk(streak: Streak, today: date) -> bool:
    """True while the streak is alive but the user has not sent anything today."""
    return streak.last_date != today and live_streak(streak, today) > 0
