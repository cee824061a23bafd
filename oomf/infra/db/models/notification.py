"""Notification inbox database model."""
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, JSON, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from oomf.infra.db.base import Base
from oomf.domain.notifications.events import EventType


class NotificationModel(Base):
    """One delivered event in a user's inbox."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "is_read"),
    )

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        SQLEnum(EventType, name="notification_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    # Links lifted out of the payload so the inbox can be filtered per compliment.
    compliment_id = Column(String, nullable=True, index=True)
    chat_id = Column(String, nullable=True)
    payload = Column(JSON, nullable=True)  # ids only; never the anonymous sender
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("UserModel", backref="notifications")
