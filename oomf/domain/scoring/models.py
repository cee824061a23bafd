"""Scoring domain models."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TransactionCategory(str, Enum):
    """Token transaction category enum."""
    SPEND = "SPEND"
    EARN = "EARN"


class TokenReason(str, Enum):
    """Why tokens moved."""
    HINT = "hint"
    REVEAL = "reveal"
    SECRET_ADMIRER = "secret_admirer"
    SEND_REWARD = "send_reward"
    PURCHASE = "purchase"


class Stat(str, Enum):
    """User counters the engine may increment."""
    COMPLIMENTS_SENT = "compliments_sent"
    COMPLIMENTS_RECEIVED = "compliments_received"
    CORRECT_GUESSES = "correct_guesses"


@dataclass
class PublicProfile:
    """Identity fields shown once a sender is revealed."""
    id: str
    username: str
    display_name: str
    avatar_url: Optional[str]


@dataclass
class UserStats:
    """Scoring view of a user row."""
    id: str
    username: str
    display_name: str
    avatar_url: Optional[str]
    oomf_score: int
    tokens: int
    compliments_sent: int
    compliments_received: int
    correct_guesses: int
    created_at: datetime

    def to_public(self) -> PublicProfile:
        return PublicProfile(
            id=self.id,
            username=self.username,
            display_name=self.display_name,
            avatar_url=self.avatar_url,
        )


@dataclass
class TokenTransaction:
    """Token ledger entry."""
    id: str
    user_id: str
    category: TransactionCategory
    amount: int
    reason: TokenReason
    compliment_id: Optional[str]
    created_at: datetime
