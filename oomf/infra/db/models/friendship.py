"""Friendship and block database models (owned by the social graph)."""
from datetime import datetime
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index, Enum as SQLEnum

from oomf.infra.db.base import Base


class FriendshipStatus(str, enum.Enum):
    """Friendship status enum."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    BLOCKED = "blocked"


class FriendshipModel(Base):
    """Friend request / friendship between two users."""

    __tablename__ = "friendships"

    id = Column(String, primary_key=True)
    requester_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    addressee_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(
        SQLEnum(FriendshipStatus, name="friendship_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=FriendshipStatus.PENDING,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("requester_id", "addressee_id", name="uq_friendship_pair"),
        CheckConstraint("requester_id != addressee_id", name="ck_friendship_not_self"),
        Index("ix_friendships_lookup", "requester_id", "addressee_id", "status"),
    )


class BlockedUserModel(Base):
    """One user blocking another."""

    __tablename__ = "blocked_users"

    id = Column(String, primary_key=True)
    blocker_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    blocked_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_id", name="uq_blocked_pair"),
        CheckConstraint("blocker_id != blocked_id", name="ck_block_not_self"),
    )
