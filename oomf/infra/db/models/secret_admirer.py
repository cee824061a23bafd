"""Secret Admirer chat database models."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text, CheckConstraint, Index

from oomf.infra.db.base import Base
from oomf.domain.secret_admirer.models import SecretAdmirerChat, SecretAdmirerMessage


class SecretAdmirerChatModel(Base):
    """Chat opened by a Secret Admirer compliment."""

    __tablename__ = "secret_admirer_chats"

    id = Column(String, primary_key=True)
    compliment_id = Column(String, ForeignKey("compliments.id", ondelete="CASCADE"), nullable=False, unique=True)
    sender_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    exchange_count = Column(Integer, default=0, nullable=False)
    is_revealed = Column(Boolean, default=False, nullable=False)
    revealed_at = Column(DateTime, nullable=True)
    version = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("exchange_count >= 0", name="ck_sa_chats_exchange_count"),
    )

    def to_entity(self) -> SecretAdmirerChat:
        """Convert to domain entity."""
        return SecretAdmirerChat(
            id=self.id,
            compliment_id=self.compliment_id,
            sender_id=self.sender_id,
            receiver_id=self.receiver_id,
            exchange_count=self.exchange_count,
            is_revealed=self.is_revealed,
            revealed_at=self.revealed_at,
            version=self.version,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: SecretAdmirerChat) -> "SecretAdmirerChatModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            compliment_id=entity.compliment_id,
            sender_id=entity.sender_id,
            receiver_id=entity.receiver_id,
            exchange_count=entity.exchange_count,
            is_revealed=entity.is_revealed,
            revealed_at=entity.revealed_at,
            version=entity.version,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


class SecretAdmirerMessageModel(Base):
    """Append-only chat message."""

    __tablename__ = "secret_admirer_messages"

    id = Column(String, primary_key=True)
    chat_id = Column(String, ForeignKey("secret_admirer_chats.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    body = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_sa_messages_chat_created", "chat_id", "created_at"),
    )

    def to_entity(self) -> SecretAdmirerMessage:
        return SecretAdmirerMessage(
            id=self.id,
            chat_id=self.chat_id,
            sender_id=self.sender_id,
            body=self.body,
            is_read=self.is_read,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, entity: SecretAdmirerMessage) -> "SecretAdmirerMessageModel":
        return cls(
            id=entity.id,
            chat_id=entity.chat_id,
            sender_id=entity.sender_id,
            body=entity.body,
            is_read=entity.is_read,
            created_at=entity.created_at,
        )
