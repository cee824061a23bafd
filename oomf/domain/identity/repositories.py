"""Identity and relationship gate protocol."""
from typing import Protocol


class IdentityGate(Protocol):
    """Friendship and block checks owned by the social graph."""

    async def is_friend(self, user_a: str, user_b: str) -> bool:
        """True when an accepted friendship exists in either direction."""
        ...

    async def is_blocked(self, blocker_id: str, blocked_id: str) -> bool:
        """True when ``blocker_id`` has blocked ``blocked_id``."""
        ...


async def can_interact(gate: IdentityGate, user_a: str, user_b: str) -> bool:
    """Friends with no block in either direction."""
    if not await gate.is_friend(user_a, user_b):
        return False
    if await gate.is_blocked(user_a, user_b) or await gate.is_blocked(user_b, user_a):
        return False
    return True
