"""Token spend domain models."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class HintType(str, Enum):
    """What a purchased hint discloses about the sender."""
    FIRST_LETTER = "first_letter"
    JOIN_DATE = "join_date"
    LEVEL = "level"


@dataclass
class IssuedHint:
    """A hint already paid for; re-reading it is free."""
    compliment_id: str
    hint_number: int
    hint_type: HintType
    hint_label: str
    hint_value: str
    created_at: datetime


@dataclass
class HintResult:
    hint: IssuedHint
    tokens_remaining: int


@dataclass
class RevealResult:
    sender_id: str
    username: str
    display_name: str
    avatar_url: Optional[str]
    tokens_remaining: int
