"""Push-token registration routes."""
import logging
from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from oomf.api.deps import get_current_user, get_db
from oomf.domain.common.errors import NotFoundError
from oomf.domain.users.models import User
from oomf.infra.db.models.device import DeviceModel, DevicePlatform
from oomf.infra.db.repositories.device_repo import DeviceRepository

logger = logging.getLogger(__name__)

router = APIRouter()


class PushTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=4096)
    platform: DevicePlatform


class DeviceResponse(BaseModel):
    id: str
    platform: DevicePlatform
    last_registered_at: datetime

    @classmethod
    def from_model(cls, m: DeviceModel) -> "DeviceResponse":
        return cls(id=m.id, platform=m.platform, last_registered_at=m.last_registered_at)


@router.post("/push-token", response_model=DeviceResponse)
async def register_push_token(
    request: PushTokenRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Register this device for pushes. Re-registering a token moves it to the caller."""
    device = await DeviceRepository(db).register(current_user.id, request.token, request.platform)
    logger.info("[DEVICE] Registered %s push token for user %s", request.platform.value, current_user.id)
    return DeviceResponse.from_model(device)


@router.get("", response_model=List[DeviceResponse])
async def list_devices(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return [DeviceResponse.from_model(d) for d in await DeviceRepository(db).list_for_user(current_user.id)]


@router.delete("/push-token/{token}", status_code=204)
async def unregister_push_token(
    token: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await DeviceRepository(db).unregister(current_user.id, token):
        raise NotFoundError("Device", token)
