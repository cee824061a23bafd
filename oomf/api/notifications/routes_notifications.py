"""Notification inbox routes."""
from datetime import datetime
from typing import Optional, List, Any
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from oomf.api.deps import get_current_user, get_db
from oomf.domain.common.errors import NotFoundError
from oomf.domain.notifications.events import EventType
from oomf.domain.users.models import User
from oomf.infra.db.models.notification import NotificationModel
from oomf.infra.db.repositories.notification_repo import NotificationRepository

router = APIRouter()


class NotificationResponse(BaseModel):
    id: str
    type: EventType
    title: str
    message: str
    compliment_id: Optional[str] = None
    chat_id: Optional[str] = None
    payload: Optional[dict[str, Any]] = None
    is_read: bool
    created_at: datetime

    @classmethod
    def from_model(cls, m: NotificationModel) -> "NotificationResponse":
        return cls(
            id=m.id,
            type=m.type,
            title=m.title,
            message=m.message,
            compliment_id=m.compliment_id,
            chat_id=m.chat_id,
            payload=m.payload,
            is_read=m.is_read,
            created_at=m.created_at,
        )


class UnreadCountResponse(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    marked: int


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    type: Optional[EventType] = None,
    compliment_id: Optional[str] = None,
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Inbox, newest first."""
    models = await NotificationRepository(db).list_for_user(
        current_user.id,
        limit=limit,
        event_type=type,
        compliment_id=compliment_id,
        unread_only=unread_only,
    )
    return [NotificationResponse.from_model(m) for m in models]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return UnreadCountResponse(unread=await NotificationRepository(db).count_unread(current_user.id))


@router.patch("/{notification_id}/read", status_code=204)
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await NotificationRepository(db).mark_read(notification_id, current_user.id):
        raise NotFoundError("Notification", notification_id)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    compliment_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Clear the unread badge, optionally only for one compliment's events."""
    marked = await NotificationRepository(db).mark_all_read(current_user.id, compliment_id=compliment_id)
    return MarkAllReadResponse(marked=marked)
