"""Secret Admirer chat repository implementation."""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, or_

from oomf.domain.secret_admirer.models import SecretAdmirerChat, SecretAdmirerMessage
from oomf.domain.secret_admirer.repositories import SecretAdmirerRepository
from oomf.infra.db.models.secret_admirer import SecretAdmirerChatModel, SecretAdmirerMessageModel


class SecretAdmirerRepositoryImpl(SecretAdmirerRepository):
    """Secret Admirer chat repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_chat(self, chat: SecretAdmirerChat) -> SecretAdmirerChat:
        model = SecretAdmirerChatModel.from_entity(chat)
        self.session.add(model)
        await self.session.flush()
        return model.to_entity()

    async def _get_one(self, q) -> Optional[SecretAdmirerChat]:
        result = await self.session.execute(q.execution_options(populate_existing=True))
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def get_chat(self, chat_id: str) -> Optional[SecretAdmirerChat]:
        return await self._get_one(
            select(SecretAdmirerChatModel).where(SecretAdmirerChatModel.id == chat_id)
        )

    async def get_chat_for_update(self, chat_id: str) -> Optional[SecretAdmirerChat]:
        return await self._get_one(
            select(SecretAdmirerChatModel).where(SecretAdmirerChatModel.id == chat_id).with_for_update()
        )

    async def get_chat_by_compliment(self, compliment_id: str) -> Optional[SecretAdmirerChat]:
        return await self._get_one(
            select(SecretAdmirerChatModel).where(SecretAdmirerChatModel.compliment_id == compliment_id)
        )

    async def compare_and_set(self, chat: SecretAdmirerChat, expected_version: int) -> bool:
        result = await self.session.execute(
            update(SecretAdmirerChatModel)
            .where(
                SecretAdmirerChatModel.id == chat.id,
                SecretAdmirerChatModel.version == expected_version,
            )
            .values(
                exchange_count=chat.exchange_count,
                is_revealed=chat.is_revealed,
                revealed_at=chat.revealed_at,
                version=chat.version,
                updated_at=chat.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_chats_for_user(self, user_id: str) -> list[SecretAdmirerChat]:
        result = await self.session.execute(
            select(SecretAdmirerChatModel)
            .where(
                or_(
                    SecretAdmirerChatModel.sender_id == user_id,
                    SecretAdmirerChatModel.receiver_id == user_id,
                )
            )
            .order_by(SecretAdmirerChatModel.updated_at.desc())
            .execution_options(populate_existing=True)
        )
        return [m.to_entity() for m in result.scalars().all()]

    # Messages
    async def add_message(self, message: SecretAdmirerMessage) -> SecretAdmirerMessage:
        model = SecretAdmirerMessageModel.from_entity(message)
        self.session.add(model)
        await self.session.flush()
        return model.to_entity()

    async def list_messages(self, chat_id: str) -> list[SecretAdmirerMessage]:
        result = await self.session.execute(
            select(SecretAdmirerMessageModel)
            .where(SecretAdmirerMessageModel.chat_id == chat_id)
            .order_by(SecretAdmirerMessageModel.created_at, SecretAdmirerMessageModel.id)
            .execution_options(populate_existing=True)
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def get_last_message(self, chat_id: str) -> Optional[SecretAdmirerMessage]:
        result = await self.session.execute(
            select(SecretAdmirerMessageModel)
            .where(SecretAdmirerMessageModel.chat_id == chat_id)
            .order_by(SecretAdmirerMessageModel.created_at.desc())
            .limit(1)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def count_unread(self, chat_id: str, reader_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(SecretAdmirerMessageModel).where(
                SecretAdmirerMessageModel.chat_id == chat_id,
                SecretAdmirerMessageModel.sender_id != reader_id,
                SecretAdmirerMessageModel.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def mark_read(self, chat_id: str, reader_id: str) -> int:
        result = await self.session.execute(
            update(SecretAdmirerMessageModel)
            .where(
                SecretAdmirerMessageModel.chat_id == chat_id,
                SecretAdmirerMessageModel.sender_id != reader_id,
                SecretAdmirerMessageModel.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
