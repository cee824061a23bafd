"""Push-token database model."""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from oomf.infra.db.base import Base


class DevicePlatform(str, Enum):
    IOS = "ios"
    ANDROID = "android"


class DeviceModel(Base):
    """A push token; the token belongs to whichever user registered it last."""

    __tablename__ = "devices"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    push_token = Column(String, nullable=False, unique=True)
    platform = Column(
        SQLEnum(DevicePlatform, name="device_platform", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_registered_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("UserModel", backref="devices")
