"""Notification inbox repository."""
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func

from oomf.domain.common.types import generate_id
from oomf.domain.notifications.events import EventType
from oomf.infra.db.models.notification import NotificationModel


class NotificationRepository:
    """Inbox rows are written outside engine transactions, so this repository commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(
        self,
        user_id: str,
        event_type: EventType,
        title: str,
        message: str,
        payload: Optional[dict] = None,
    ) -> NotificationModel:
        payload = payload or {}
        model = NotificationModel(
            id=generate_id(),
            user_id=user_id,
            type=event_type,
            title=title,
            message=message,
            compliment_id=payload.get("compliment_id"),
            chat_id=payload.get("chat_id"),
            payload=payload or None,
            is_read=False,
            created_at=datetime.utcnow(),
        )
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return model

    async def list_for_user(
        self,
        user_id: str,
        limit: int = 50,
        event_type: Optional[EventType] = None,
        compliment_id: Optional[str] = None,
        unread_only: bool = False,
    ) -> list[NotificationModel]:
        """Newest first."""
        q = select(NotificationModel).where(NotificationModel.user_id == user_id)
        if event_type is not None:
            q = q.where(NotificationModel.type == event_type)
        if compliment_id is not None:
            q = q.where(NotificationModel.compliment_id == compliment_id)
        if unread_only:
            q = q.where(NotificationModel.is_read.is_(False))
        result = await self.session.execute(
            q.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def count_unread(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(NotificationModel).where(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def mark_read(self, notification_id: str, user_id: str) -> bool:
        """False when the notification does not exist or belongs to someone else."""
        result = await self.session.execute(
            select(NotificationModel.is_read).where(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
        )
        is_read = result.scalar_one_or_none()
        if is_read is None:
            return False
        if not is_read:
            await self.session.execute(
                update(NotificationModel)
                .where(NotificationModel.id == notification_id)
                .values(is_read=True, read_at=datetime.utcnow())
            )
            await self.session.commit()
        return True

    async def mark_all_read(self, user_id: str, compliment_id: Optional[str] = None) -> int:
        """Returns how many unread rows were marked."""
        q = update(NotificationModel).where(
            NotificationModel.user_id == user_id,
            NotificationModel.is_read.is_(False),
        )
        if compliment_id is not None:
            q = q.where(NotificationModel.compliment_id == compliment_id)
        result = await self.session.execute(q.values(is_read=True, read_at=datetime.utcnow()))
        await self.session.commit()
        return result.rowcount or 0
