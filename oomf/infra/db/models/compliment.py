"""Compliment, guess and issued-hint database models."""
from datetime import datetime
from typing import Optional
from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, ForeignKey, Text,
    CheckConstraint, UniqueConstraint, Index, Enum as SQLEnum,
)

from oomf.infra.db.base import Base
from oomf.domain.compliments.models import Compliment, ComplimentOrigin, Guess, Reaction, RevealMethod
from oomf.domain.scoring.rules import MAX_GUESSES
from oomf.domain.tokens.models import HintType, IssuedHint


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ComplimentModel(Base):
    """Anonymous compliment with its disclosure state."""

    __tablename__ = "compliments"

    id = Column(String, primary_key=True)
    sender_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    template_id = Column(String, ForeignKey("templates.id"), nullable=True)
    custom_text = Column(Text, nullable=True)
    emoji = Column(String, nullable=True)
    category = Column(String, nullable=True)
    origin = Column(
        SQLEnum(ComplimentOrigin, name="compliment_origin", values_callable=_enum_values),
        nullable=False,
        default=ComplimentOrigin.NORMAL,
    )
    tokens_spent = Column(Integer, default=0, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    is_revealed = Column(Boolean, default=False, nullable=False)
    reveal_method = Column(
        SQLEnum(RevealMethod, name="reveal_method", values_callable=_enum_values),
        nullable=True,
    )
    revealed_at = Column(DateTime, nullable=True)
    guesses_remaining = Column(Integer, default=3, nullable=False)
    hints_used = Column(Integer, default=0, nullable=False)
    reaction = Column(
        SQLEnum(Reaction, name="compliment_reaction", values_callable=_enum_values),
        nullable=True,
    )
    version = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("sender_id != receiver_id", name="ck_compliments_not_self"),
        CheckConstraint(
            "(template_id IS NULL) != (custom_text IS NULL)",
            name="ck_compliments_one_content_source",
        ),
        CheckConstraint(f"guesses_remaining >= 0 AND guesses_remaining <= {MAX_GUESSES}", name="ck_compliments_guesses_range"),
        CheckConstraint("hints_used >= 0 AND hints_used <= 3", name="ck_compliments_hints_range"),
        CheckConstraint(
            "is_revealed = false OR reveal_method IS NOT NULL",
            name="ck_compliments_reveal_has_method",
        ),
        Index("ix_compliments_receiver_created", "receiver_id", "created_at"),
        Index("ix_compliments_sender_created", "sender_id", "created_at"),
    )

    def to_entity(self, template_text: Optional[str] = None) -> Compliment:
        """Convert to domain entity."""
        return Compliment(
            id=self.id,
            sender_id=self.sender_id,
            receiver_id=self.receiver_id,
            template_id=self.template_id,
            custom_text=self.custom_text,
            emoji=self.emoji,
            category=self.category,
            origin=self.origin,
            tokens_spent=self.tokens_spent,
            is_read=self.is_read,
            read_at=self.read_at,
            is_revealed=self.is_revealed,
            reveal_method=self.reveal_method,
            revealed_at=self.revealed_at,
            guesses_remaining=self.guesses_remaining,
            hints_used=self.hints_used,
            version=self.version,
            created_at=self.created_at,
            template_text=template_text,
            reaction=self.reaction,
        )

    @classmethod
    def from_entity(cls, entity: Compliment) -> "ComplimentModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            sender_id=entity.sender_id,
            receiver_id=entity.receiver_id,
            template_id=entity.template_id,
            custom_text=entity.custom_text,
            emoji=entity.emoji,
            category=entity.category,
            origin=entity.origin,
            tokens_spent=entity.tokens_spent,
            is_read=entity.is_read,
            read_at=entity.read_at,
            is_revealed=entity.is_revealed,
            reveal_method=entity.reveal_method,
            revealed_at=entity.revealed_at,
            guesses_remaining=entity.guesses_remaining,
            hints_used=entity.hints_used,
            reaction=entity.reaction,
            version=entity.version,
            created_at=entity.created_at,
        )


class GuessModel(Base):
    """One recorded guess attempt."""

    __tablename__ = "guesses"

    id = Column(String, primary_key=True)
    compliment_id = Column(String, ForeignKey("compliments.id", ondelete="CASCADE"), nullable=False, index=True)
    guesser_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    guessed_user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    is_correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_entity(self) -> Guess:
        return Guess(
            id=self.id,
            compliment_id=self.compliment_id,
            guesser_id=self.guesser_id,
            guessed_user_id=self.guessed_user_id,
            is_correct=self.is_correct,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, entity: Guess) -> "GuessModel":
        return cls(
            id=entity.id,
            compliment_id=entity.compliment_id,
            guesser_id=entity.guesser_id,
            guessed_user_id=entity.guessed_user_id,
            is_correct=entity.is_correct,
            created_at=entity.created_at,
        )


class ComplimentHintModel(Base):
    """Hint value issued for a compliment, kept so re-reads are free."""

    __tablename__ = "compliment_hints"

    id = Column(Integer, primary_key=True, autoincrement=True)
    compliment_id = Column(String, ForeignKey("compliments.id", ondelete="CASCADE"), nullable=False)
    hint_number = Column(Integer, nullable=False)
    hint_type = Column(SQLEnum(HintType, name="hint_type", values_callable=_enum_values), nullable=False)
    hint_label = Column(String, nullable=False)
    hint_value = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("compliment_id", "hint_number", name="uq_compliment_hint_number"),
        CheckConstraint("hint_number >= 1 AND hint_number <= 3", name="ck_compliment_hints_number_range"),
    )

    def to_entity(self) -> IssuedHint:
        return IssuedHint(
            compliment_id=self.compliment_id,
            hint_number=self.hint_number,
            hint_type=self.hint_type,
            hint_label=self.hint_label,
            hint_value=self.hint_value,
            created_at=self.created_at,
        )

    @classmethod
    def from_entity(cls, entity: IssuedHint) -> "ComplimentHintModel":
        return cls(
            compliment_id=entity.compliment_id,
            hint_number=entity.hint_number,
            hint_type=entity.hint_type,
            hint_label=entity.hint_label,
            hint_value=entity.hint_value,
            created_at=entity.created_at,
        )
