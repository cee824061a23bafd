"""Token ledger database model."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint, Index, Enum as SQLEnum

from oomf.infra.db.base import Base
from oomf.domain.scoring.models import TokenReason, TokenTransaction, TransactionCategory


class TokenTransactionModel(Base):
    """Every token debit and credit, written in the same transaction as the balance change."""

    __tablename__ = "token_transactions"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category = Column(SQLEnum(TransactionCategory, name="token_transaction_category"), nullable=False)
    amount = Column(Integer, nullable=False)
    reason = Column(
        SQLEnum(TokenReason, name="token_reason", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    compliment_id = Column(String, ForeignKey("compliments.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_token_transactions_amount_positive"),
        Index("ix_token_transactions_user_created", "user_id", "created_at"),
    )

    def to_entity(self) -> TokenTransaction:
        """Convert to domain entity."""
        return TokenTransaction(
            id=self.id,
            user_id=self.user_id,
            category=self.category,
            amount=self.amount,
            reason=self.reason,
            compliment_id=self.compliment_id,
            created_at=self.created_at,
        )
