"""Secret Admirer chat routes."""
from datetime import datetime
from typing import Optional, List
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from oomf.api.deps import get_current_user, get_secret_admirer_service
from oomf.domain.secret_admirer.models import ChatParticipant, ChatView, MessageView
from oomf.domain.secret_admirer.services import SecretAdmirerService
from oomf.domain.users.models import User

router = APIRouter()


class ParticipantResponse(BaseModel):
    id: Optional[str] = None
    username: str
    display_name: str
    avatar_url: Optional[str] = None

    @classmethod
    def from_participant(cls, p: ChatParticipant) -> "ParticipantResponse":
        return cls(id=p.id, username=p.username, display_name=p.display_name, avatar_url=p.avatar_url)


class MessageResponse(BaseModel):
    id: str
    sender_id: Optional[str] = None
    body: str
    is_read: bool
    is_own: bool
    created_at: datetime

    @classmethod
    def from_view(cls, m: MessageView) -> "MessageResponse":
        return cls(
            id=m.id,
            sender_id=m.sender_id,
            body=m.body,
            is_read=m.is_read,
            is_own=m.is_own,
            created_at=m.created_at,
        )


class ChatResponse(BaseModel):
    id: str
    compliment_id: str
    exchange_count: int
    is_revealed: bool
    revealed_at: Optional[datetime] = None
    messages_until_reveal: int
    sender: ParticipantResponse
    receiver: ParticipantResponse
    messages: List[MessageResponse]

    @classmethod
    def from_view(cls, view: ChatView) -> "ChatResponse":
        return cls(
            id=view.chat.id,
            compliment_id=view.chat.compliment_id,
            exchange_count=view.chat.exchange_count,
            is_revealed=view.chat.is_revealed,
            revealed_at=view.chat.revealed_at,
            messages_until_reveal=view.messages_until_reveal,
            sender=ParticipantResponse.from_participant(view.sender),
            receiver=ParticipantResponse.from_participant(view.receiver),
            messages=[MessageResponse.from_view(m) for m in view.messages],
        )


class ChatSummaryResponse(BaseModel):
    id: str
    compliment_id: str
    is_revealed: bool
    exchange_count: int
    messages_until_reveal: int
    unread_count: int
    other_user: ParticipantResponse
    last_message: Optional[MessageResponse] = None
    updated_at: datetime


class ReplyRequest(BaseModel):
    message: str


class ReplyResponse(BaseModel):
    delivered: bool = True
    message_id: str
    exchange_count: int
    is_revealed: bool
    just_revealed: bool
    messages_until_reveal: int


class MarkReadResponse(BaseModel):
    marked: int


@router.get("/chats", response_model=List[ChatSummaryResponse])
async def list_chats(
    current_user: User = Depends(get_current_user),
    service: SecretAdmirerService = Depends(get_secret_admirer_service),
):
    summaries = await service.list_chats(current_user.id)
    return [
        ChatSummaryResponse(
            id=s.chat.id,
            compliment_id=s.chat.compliment_id,
            is_revealed=s.chat.is_revealed,
            exchange_count=s.chat.exchange_count,
            messages_until_reveal=s.messages_until_reveal,
            unread_count=s.unread_count,
            other_user=ParticipantResponse.from_participant(s.other_user),
            last_message=MessageResponse.from_view(s.last_message) if s.last_message else None,
            updated_at=s.chat.updated_at,
        )
        for s in summaries
    ]


@router.get("/chats/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: str,
    current_user: User = Depends(get_current_user),
    service: SecretAdmirerService = Depends(get_secret_admirer_service),
):
    """Chat with messages; marks the other party's messages read."""
    return ChatResponse.from_view(await service.get_chat(chat_id, current_user.id))


@router.get("/compliments/{compliment_id}/chat", response_model=ChatResponse)
async def get_chat_by_compliment(
    compliment_id: str,
    current_user: User = Depends(get_current_user),
    service: SecretAdmirerService = Depends(get_secret_admirer_service),
):
    return ChatResponse.from_view(await service.get_chat_by_compliment(compliment_id, current_user.id))


@router.post("/chats/{chat_id}/messages", response_model=ReplyResponse)
async def send_reply(
    chat_id: str,
    request: ReplyRequest,
    current_user: User = Depends(get_current_user),
    service: SecretAdmirerService = Depends(get_secret_admirer_service),
):
    """Reply in a Secret Admirer chat; the sixth reply reveals both parties."""
    result = await service.send_reply(chat_id, current_user.id, request.message)
    return ReplyResponse(
        message_id=result.message.id,
        exchange_count=result.exchange_count,
        is_revealed=result.is_revealed,
        just_revealed=result.just_revealed,
        messages_until_reveal=result.messages_until_reveal,
    )


@router.post("/chats/{chat_id}/read", response_model=MarkReadResponse)
async def mark_messages_read(
    chat_id: str,
    current_user: User = Depends(get_current_user),
    service: SecretAdmirerService = Depends(get_secret_admirer_service),
):
    return MarkReadResponse(marked=await service.mark_messages_read(chat_id, current_user.id))
