"""Appliance model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Enum, Float, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from homewatt.database import Base, utc_now
from homewatt.engine.load import DeviceState, DeviceStatus


class Appliance(Base):
    """A household device with a rated power draw."""

    __tablename__ = "appliances"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    power_rating_w: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default="0"
    )
    status: Mapped[DeviceStatus] = mapped_column(
        Enum(DeviceStatus),
        nullable=False,
        default=DeviceStatus.OFF,
        server_default=DeviceStatus.OFF.name,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def to_device_state(self) -> DeviceState:
        return DeviceState(
            id=str(self.id),
            name=self.name,
            power_rating_w=self.power_rating_w or 0.0,
            status=self.status,
        )
