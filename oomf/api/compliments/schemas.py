"""Request/response models shared by compliment routes."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from oomf.domain.compliments.models import REACTION_EMOJI, Compliment, ComplimentView, Reaction
from oomf.domain.scoring.models import PublicProfile


class SenderResponse(BaseModel):
    """Sender identity, only present once it may be shown."""
    id: str
    username: str
    display_name: str
    avatar_url: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: PublicProfile) -> "SenderResponse":
        return cls(
            id=profile.id,
            username=profile.username,
            display_name=profile.display_name,
            avatar_url=profile.avatar_url,
        )


class ComplimentResponse(BaseModel):
    """Compliment as the caller may see it; sender_id is null while anonymous."""
    id: str
    sender_id: Optional[str] = None
    receiver_id: str
    sender: Optional[SenderResponse] = None
    text: Optional[str] = None
    template_id: Optional[str] = None
    emoji: Optional[str] = None
    category: Optional[str] = None
    origin: str
    is_read: bool
    read_at: Optional[datetime] = None
    is_revealed: bool
    reveal_method: Optional[str] = None
    revealed_at: Optional[datetime] = None
    guesses_remaining: int
    hints_used: int
    reaction: Optional[Reaction] = None
    chat_id: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_view(cls, view: ComplimentView) -> "ComplimentResponse":
        c = view.compliment
        return cls(
            id=c.id,
            sender_id=view.sender_id,
            receiver_id=c.receiver_id,
            sender=SenderResponse.from_profile(view.sender) if view.sender else None,
            text=c.text,
            template_id=c.template_id,
            emoji=c.emoji,
            category=c.category,
            origin=c.origin.value,
            is_read=c.is_read,
            read_at=c.read_at,
            is_revealed=c.is_revealed,
            reveal_method=c.reveal_method.value if c.reveal_method else None,
            revealed_at=c.revealed_at,
            guesses_remaining=c.guesses_remaining,
            hints_used=c.hints_used,
            reaction=c.reaction,
            chat_id=view.chat_id,
            created_at=c.created_at,
        )


class ComplimentListResponse(BaseModel):
    compliments: List[ComplimentResponse]


class SendComplimentRequest(BaseModel):
    """Send compliment request: exactly one of template_id or custom_text."""
    receiver_id: str
    template_id: Optional[str] = None
    custom_text: Optional[str] = Field(default=None, max_length=2000)


class SendComplimentResponse(BaseModel):
    id: str
    origin: str


class OkResponse(BaseModel):
    ok: bool = True


class ReactionRequest(BaseModel):
    reaction: Optional[Reaction] = None


class ReactionResponse(BaseModel):
    id: str
    reaction: Optional[Reaction] = None
    emoji: Optional[str] = None

    @classmethod
    def from_compliment(cls, compliment: Compliment) -> "ReactionResponse":
        return cls(
            id=compliment.id,
            reaction=compliment.reaction,
            emoji=REACTION_EMOJI.get(compliment.reaction) if compliment.reaction else None,
        )
