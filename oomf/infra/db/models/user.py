"""User database model."""
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Date, DateTime, Integer, Text, CheckConstraint, Index, ForeignKey, UniqueConstraint

from oomf.infra.db.base import Base
from oomf.domain.users.models import User as UserEntity
from oomf.domain.scoring.models import PublicProfile, UserStats
from oomf.domain.scoring.streaks import Streak


class UserModel(Base):
    """User database model.

    Profile columns are owned by the profile service; the compliment engine only
    touches the scoring columns (oomf_score, tokens and the counters).
    """

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    username = Column(String, unique=True, index=True, nullable=False)
    display_name = Column(String, nullable=False)
    avatar_url = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    oomf_score = Column(Integer, default=0, nullable=False)
    tokens = Column(Integer, default=3, nullable=False)
    compliments_sent = Column(Integer, default=0, nullable=False)
    compliments_received = Column(Integer, default=0, nullable=False)
    correct_guesses = Column(Integer, default=0, nullable=False)
    streak_current = Column(Integer, default=0, nullable=False)
    streak_best = Column(Integer, default=0, nullable=False)
    streak_last_date = Column(Date, nullable=True)
    streak_freezes = Column(Integer, default=1, nullable=False)
    streak_freeze_used_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("tokens >= 0", name="ck_users_tokens_non_negative"),
        CheckConstraint("streak_freezes >= 0", name="ck_users_streak_freezes_non_negative"),
        Index("ix_users_oomf_score", "oomf_score"),
    )

    def to_entity(self) -> UserEntity:
        """Convert to domain entity."""
        return UserEntity(
            id=self.id,
            username=self.username,
            display_name=self.display_name,
            avatar_url=self.avatar_url,
            bio=self.bio,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_stats(self) -> UserStats:
        return UserStats(
            id=self.id,
            username=self.username,
            display_name=self.display_name,
            avatar_url=self.avatar_url,
            oomf_score=self.oomf_score,
            tokens=self.tokens,
            compliments_sent=self.compliments_sent,
            compliments_received=self.compliments_received,
            correct_guesses=self.correct_guesses,
            created_at=self.created_at,
        )

    def to_public(self) -> PublicProfile:
        return PublicProfile(
            id=self.id,
            username=self.username,
            display_name=self.display_name,
            avatar_url=self.avatar_url,
        )

    def to_streak(self) -> Streak:
        return Streak(
            current=self.streak_current,
            best=self.streak_best,
            last_date=self.streak_last_date,
            freezes=self.streak_freezes,
            freeze_used_date=self.streak_freeze_used_date,
        )


class StreakMilestoneModel(Base):
    """First time a user's streak reached one of the milestone lengths."""

    __tablename__ = "streak_milestones"
    __table_args__ = (
        UniqueConstraint("user_id", "milestone_days", name="uq_streak_milestones_user_days"),
    )

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    milestone_days = Column(Integer, nullable=False)
    achieved_at = Column(DateTime, default=datetime.utcnow, nullable=False)
