"""Compliment domain models."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from oomf.domain.scoring.models import PublicProfile


class ComplimentOrigin(str, Enum):
    """How the compliment was created."""
    NORMAL = "normal"
    SECRET_ADMIRER = "secret_admirer"


class RevealMethod(str, Enum):
    """Cause of a sender disclosure."""
    GUESSED = "guessed"
    TOKENS = "tokens"
    EXCHANGE = "exchange"  # Secret Admirer chat reached its reveal threshold


class Reaction(str, Enum):
    """Receiver's reaction to a compliment."""
    FIRE = "fire"
    HEART = "heart"
    LAUGH = "laugh"
    CRY = "cry"
    CROWN = "crown"


REACTION_EMOJI = {
    Reaction.FIRE: "🔥",
    Reaction.HEART: "❤️",
    Reaction.LAUGH: "😂",
    Reaction.CRY: "🥹",
    Reaction.CROWN: "👑",
}


@dataclass
class Template:
    """Compliment template domain model."""
    id: str
    text: str
    emoji: str
    category: str
    usage_count: int
    is_active: bool


@dataclass
class Compliment:
    """Anonymous compliment domain model.

    Disclosure fields (is_revealed, reveal_method, guesses_remaining, hints_used)
    are only ever changed through ``oomf.domain.compliments.disclosure``; the
    ``version`` counter is bumped on each change and is the compare-and-set
    token used by the repository.
    """
    id: str
    sender_id: str
    receiver_id: str
    template_id: Optional[str]
    custom_text: Optional[str]
    emoji: Optional[str]
    category: Optional[str]
    origin: ComplimentOrigin
    tokens_spent: int
    is_read: bool
    read_at: Optional[datetime]
    is_revealed: bool
    reveal_method: Optional[RevealMethod]
    revealed_at: Optional[datetime]
    guesses_remaining: int
    hints_used: int
    version: int
    created_at: datetime
    template_text: Optional[str] = None  # joined from templates for display
    reaction: Optional[Reaction] = None

    @property
    def is_secret_admirer(self) -> bool:
        return self.origin == ComplimentOrigin.SECRET_ADMIRER

    @property
    def text(self) -> Optional[str]:
        """Displayable message body (custom text or the template's text)."""
        return self.custom_text if self.custom_text is not None else self.template_text

    def sender_visible_to(self, viewer_id: str) -> bool:
        """Sender identity is shown to the sender, or to anyone once revealed."""
        return viewer_id == self.sender_id or self.is_revealed


@dataclass
class Guess:
    """Guess audit record."""
    id: str
    compliment_id: str
    guesser_id: str
    guessed_user_id: str
    is_correct: bool
    created_at: datetime


@dataclass
class ComplimentView:
    """A compliment as one viewer is allowed to see it."""
    compliment: Compliment
    sender_id: Optional[str]
    sender: Optional[PublicProfile] = None
    chat_id: Optional[str] = None
