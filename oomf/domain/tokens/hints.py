"""Hint content derived from the sender's profile."""
from datetime import datetime
from typing import Optional

from oomf.domain.common.errors import ValidationError
from oomf.domain.scoring.levels import level_for_score
from oomf.domain.scoring.models import UserStats
from oomf.domain.tokens.models import HintType, IssuedHint

HINT_TYPES: dict[int, HintType] = {
    1: HintType.FIRST_LETTER,
    2: HintType.JOIN_DATE,
    3: HintType.LEVEL,
}

HINT_LABELS: dict[HintType, str] = {
    HintType.FIRST_LETTER: "Username starts with",
    HintType.JOIN_DATE: "Joined Oomf",
    HintType.LEVEL: "Current level",
}

# Month names are spelled out here so the value does not depend on the process locale.
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_join_date(joined: datetime) -> str:
    return f"{_MONTHS[joined.month - 1]} {joined.year}"


def hint_value(hint_type: HintType, sender: UserStats) -> str:
    if hint_type == HintType.FIRST_LETTER:
        return sender.username[:1].upper()
    if hint_type == HintType.JOIN_DATE:
        return format_join_date(sender.created_at)
    return level_for_score(sender.oomf_score).name


def build_hint(
    compliment_id: str,
    hint_number: int,
    sender: UserStats,
    now: Optional[datetime] = None,
) -> IssuedHint:
    """Compute hint ``hint_number`` for a compliment sent by ``sender``."""
    hint_type = HINT_TYPES.get(hint_number)
    if hint_type is None:
        raise ValidationError("Invalid hint number. Must be 1, 2, or 3.")
    return IssuedHint(
        compliment_id=compliment_id,
        hint_number=hint_number,
        hint_type=hint_type,
        hint_label=HINT_LABELS[hint_type],
        hint_value=hint_value(hint_type, sender),
        created_at=now or datetime.utcnow(),
    )
