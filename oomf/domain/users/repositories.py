"""User repository protocol."""
from typing import Protocol, Optional

from oomf.domain.users.models import User


class UserRepository(Protocol):
    """Read access to the externally owned users table."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        ...
