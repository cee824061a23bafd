"""Compliment repository protocol."""
from datetime import datetime
from typing import Protocol, Optional

from oomf.domain.compliments.models import Compliment, Guess, Reaction, Template
from oomf.domain.tokens.models import IssuedHint


class ComplimentRepository(Protocol):
    """Compliment repository protocol.

    Writes only flush; the calling service owns commit and rollback.
    """

    async def get(self, compliment_id: str) -> Optional[Compliment]:
        """Get compliment by ID (with template text)."""
        ...

    async def get_for_update(self, compliment_id: str) -> Optional[Compliment]:
        """Get compliment by ID, locking the row until the transaction ends."""
        ...

    async def create(self, compliment: Compliment) -> Compliment:
        ...

    async def compare_and_set(self, compliment: Compliment, expected_version: int) -> bool:
        """
        Persist the disclosure fields of ``compliment`` if the stored version
        still equals ``expected_version``. Returns False when another writer won.
        """
        ...

    async def mark_read(self, compliment_id: str, read_at: datetime) -> bool:
        """Set is_read once. Returns False if it was already read."""
        ...

    async def set_reaction(self, compliment_id: str, reaction: Optional[Reaction]) -> None:
        """Replace the reaction; None clears it. Disclosure state is untouched."""
        ...

    async def list_received(self, receiver_id: str, limit: int = 50, offset: int = 0) -> list[Compliment]:
        ...

    async def list_sent(self, sender_id: str, limit: int = 50, offset: int = 0) -> list[Compliment]:
        ...

    async def get_template(self, template_id: str) -> Optional[Template]:
        ...

    async def list_templates(self, category: Optional[str] = None) -> list[Template]:
        ...

    async def increment_template_usage(self, template_id: str) -> None:
        ...

    async def add_guess(self, guess: Guess) -> Guess:
        ...

    async def list_guesses(self, compliment_id: str) -> list[Guess]:
        ...

    async def add_hint(self, hint: IssuedHint) -> IssuedHint:
        """Store an issued hint. (compliment_id, hint_number) is unique."""
        ...

    async def list_hints(self, compliment_id: str) -> list[IssuedHint]:
        ...
