"""Disclosure state machine for a compliment.

Guessing, token reveals and Secret Admirer chats all change the same
disclosure fields. Every change goes through the pure functions below, which
return an updated copy with ``version`` incremented; callers persist the copy
with a compare-and-set on the previous version.
"""
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Optional

from oomf.domain.common.errors import (
    AlreadyPurchasedError,
    AlreadyRevealedError,
    OutOfGuessesError,
    OutOfSequenceError,
    ValidationError,
)
from oomf.domain.compliments.models import Compliment, RevealMethod

MAX_HINTS = 3


class DisclosureState(str, Enum):
    """Guess-game view of a compliment."""
    GUESSABLE = "guessable"
    EXHAUSTED = "exhausted"  # no guesses left, token reveal still possible
    REVEALED = "revealed"


def disclosure_state(compliment: Compliment) -> DisclosureState:
    if compliment.is_revealed:
        return DisclosureState.REVEALED
    if compliment.guesses_remaining <= 0:
        return DisclosureState.EXHAUSTED
    return DisclosureState.GUESSABLE


def ensure_not_revealed(compliment: Compliment) -> None:
    if compliment.is_revealed:
        raise AlreadyRevealedError()


def disclose(
    compliment: Compliment,
    cause: RevealMethod,
    now: Optional[datetime] = None,
) -> Compliment:
    """The single authorized reveal transition."""
    ensure_not_revealed(compliment)
    return replace(
        compliment,
        is_revealed=True,
        reveal_method=cause,
        revealed_at=now or datetime.utcnow(),
        version=compliment.version + 1,
    )


def consume_guess(compliment: Compliment) -> Compliment:
    """Spend one guess. Raises if revealed or exhausted."""
    ensure_not_revealed(compliment)
    if compliment.guesses_remaining <= 0:
        raise OutOfGuessesError()
    return replace(
        compliment,
        guesses_remaining=compliment.guesses_remaining - 1,
        version=compliment.version + 1,
    )


def check_hint_number(compliment: Compliment, hint_number: int) -> None:
    """Validate that ``hint_number`` is the next purchasable hint."""
    if hint_number < 1 or hint_number > MAX_HINTS:
        raise ValidationError(f"Invalid hint number. Must be 1, 2, or {MAX_HINTS}.")
    ensure_not_revealed(compliment)
    next_hint = compliment.hints_used + 1
    if hint_number <= compliment.hints_used:
        raise AlreadyPurchasedError(hint_number, next_hint)
    if hint_number != next_hint:
        raise OutOfSequenceError(next_hint)


def unlock_hint(compliment: Compliment, hint_number: int) -> Compliment:
    check_hint_number(compliment, hint_number)
    return replace(
        compliment,
        hints_used=hint_number,
        version=compliment.version + 1,
    )
