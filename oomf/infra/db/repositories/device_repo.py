"""Push-token repository."""
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from oomf.domain.common.types import generate_id
from oomf.infra.db.models.device import DeviceModel, DevicePlatform


class DeviceRepository:
    """Device registration is not part of any engine transaction; it commits itself."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, user_id: str, push_token: str, platform: DevicePlatform) -> DeviceModel:
        """Insert the token, or move an existing one to ``user_id``."""
        now = datetime.utcnow()
        result = await self.session.execute(select(DeviceModel).where(DeviceModel.push_token == push_token))
        device = result.scalar_one_or_none()
        if device is None:
            device = DeviceModel(
                id=generate_id(),
                user_id=user_id,
                push_token=push_token,
                platform=platform,
                created_at=now,
                last_registered_at=now,
            )
            self.session.add(device)
        else:
            device.user_id = user_id
            device.platform = platform
            device.last_registered_at = now
        await self.session.commit()
        await self.session.refresh(device)
        return device

    async def unregister(self, user_id: str, push_token: str) -> bool:
        result = await self.session.execute(
            delete(DeviceModel).where(DeviceModel.user_id == user_id, DeviceModel.push_token == push_token)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def list_for_user(self, user_id: str) -> list[DeviceModel]:
        result = await self.session.execute(
            select(DeviceModel)
            .where(DeviceModel.user_id == user_id)
            .order_by(DeviceModel.last_registered_at.desc())
        )
        return list(result.scalars().all())
