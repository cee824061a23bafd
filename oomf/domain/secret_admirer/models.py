"""Secret Admirer chat domain models."""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from oomf.domain.common.types import generate_id

MASKED_SENDER_USERNAME = "secret_admirer"
MASKED_SENDER_DISPLAY_NAME = "Secret Admirer"


@dataclass
class SecretAdmirerChat:
    """Chat attached to a Secret Admirer compliment.

    ``exchange_count`` counts replies after the opening message; the chat
    reveals both parties once it reaches the configured threshold.
    """
    id: str
    compliment_id: str
    sender_id: str
    receiver_id: str
    exchange_count: int
    is_revealed: bool
    revealed_at: Optional[datetime]
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls, compliment_id: str, sender_id: str, receiver_id: str, now: Optional[datetime] = None
    ) -> "SecretAdmirerChat":
        now = now or datetime.utcnow()
        return cls(
            id=generate_id(),
            compliment_id=compliment_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            exchange_count=0,
            is_revealed=False,
            revealed_at=None,
            version=0,
            created_at=now,
            updated_at=now,
        )

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.sender_id, self.receiver_id)

    def other_party(self, user_id: str) -> str:
        return self.receiver_id if user_id == self.sender_id else self.sender_id


@dataclass
class SecretAdmirerMessage:
    id: str
    chat_id: str
    sender_id: str
    body: str
    is_read: bool
    created_at: datetime

    @classmethod
    def create(cls, chat_id: str, sender_id: str, body: str, now: Optional[datetime] = None) -> "SecretAdmirerMessage":
        return cls(
            id=generate_id(),
            chat_id=chat_id,
            sender_id=sender_id,
            body=body,
            is_read=False,
            created_at=now or datetime.utcnow(),
        )


def record_message(
    chat: SecretAdmirerChat,
    threshold: int,
    now: Optional[datetime] = None,
) -> tuple[SecretAdmirerChat, bool]:
    """Apply one reply to the chat counters.

    Returns the updated chat and whether this reply crossed the reveal
    threshold. Replies after the reveal are still counted but never
    transition the chat again.
    """
    now = now or datetime.utcnow()
    exchange_count = chat.exchange_count + 1
    just_revealed = not chat.is_revealed and exchange_count >= threshold
    updated = replace(
        chat,
        exchange_count=exchange_count,
        is_revealed=chat.is_revealed or just_revealed,
        revealed_at=now if just_revealed else chat.revealed_at,
        version=chat.version + 1,
        updated_at=now,
    )
    return updated, just_revealed


@dataclass
class ChatParticipant:
    """Participant as shown to a viewer; masked while the sender is hidden."""
    id: Optional[str]
    username: str
    display_name: str
    avatar_url: Optional[str]


@dataclass
class MessageView:
    id: str
    sender_id: Optional[str]
    body: str
    is_read: bool
    is_own: bool
    created_at: datetime


@dataclass
class ChatView:
    chat: SecretAdmirerChat
    sender: ChatParticipant
    receiver: ChatParticipant
    messages: list[MessageView] = field(default_factory=list)
    messages_until_reveal: int = 0


@dataclass
class ChatSummary:
    chat: SecretAdmirerChat
    other_user: ChatParticipant
    last_message: Optional[MessageView]
    unread_count: int
    messages_until_reveal: int


@dataclass
class ReplyResult:
    message: SecretAdmirerMessage
    exchange_count: int
    is_revealed: bool
    just_revealed: bool
    messages_until_reveal: int


def messages_until_reveal(chat: SecretAdmirerChat, threshold: int) -> int:
    if chat.is_revealed:
        return 0
    return max(0, threshold - chat.exchange_count)
