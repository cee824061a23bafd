"""Secret Admirer chat repository protocol."""
from typing import Protocol, Optional

from oomf.domain.secret_admirer.models import SecretAdmirerChat, SecretAdmirerMessage


class SecretAdmirerRepository(Protocol):
    """Chat and message persistence. Writes only flush."""

    async def create_chat(self, chat: SecretAdmirerChat) -> SecretAdmirerChat:
        ...

    async def get_chat(self, chat_id: str) -> Optional[SecretAdmirerChat]:
        ...

    async def get_chat_for_update(self, chat_id: str) -> Optional[SecretAdmirerChat]:
        ...

    async def get_chat_by_compliment(self, compliment_id: str) -> Optional[SecretAdmirerChat]:
        ...

    async def compare_and_set(self, chat: SecretAdmirerChat, expected_version: int) -> bool:
        """Persist counters and reveal fields if the version still matches."""
        ...

    async def list_chats_for_user(self, user_id: str) -> list[SecretAdmirerChat]:
        """Chats where the user is either party, most recently active first."""
        ...

    async def add_message(self, message: SecretAdmirerMessage) -> SecretAdmirerMessage:
        ...

    async def list_messages(self, chat_id: str) -> list[SecretAdmirerMessage]:
        """Messages in creation order."""
        ...

    async def get_last_message(self, chat_id: str) -> Optional[SecretAdmirerMessage]:
        ...

    async def count_unread(self, chat_id: str, reader_id: str) -> int:
        """Unread messages written by the other party."""
        ...

    async def mark_read(self, chat_id: str, reader_id: str) -> int:
        """Mark the other party's messages read. Returns how many changed."""
        ...
