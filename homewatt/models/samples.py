"""High-frequency raw samples written every simulation tick."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Float, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from homewatt.database import Base


class EnergySample(Base):
    """Instantaneous power readings of one tick."""

    __tablename__ = "energy_samples"
    __table_args__ = (Index("ix_energy_samples_user_time", "user_id", "timestamp"),)

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    consumption_kw: Mapped[float] = mapped_column(Float, nullable=False)
    solar_kw: Mapped[float] = mapped_column(Float, nullable=False)
    grid_kw: Mapped[float] = mapped_column(Float, nullable=False)  # max(0, consumption - solar)
    battery_level: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")  # 0-100
    active_devices: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    total_devices: Mapped[int] = mapped_column(Integer, default=0, server_default="0")


class WeatherRecord(Base):
    """Weather of one tick."""

    __tablename__ = "weather_samples"
    __table_args__ = (Index("ix_weather_samples_user_time", "user_id", "timestamp"),)

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    temperature_c: Mapped[float] = mapped_column(Float)
    cloud_cover: Mapped[float] = mapped_column(Float)  # 0-1
    irradiance_wm2: Mapped[float] = mapped_column(Float)
    humidity: Mapped[float | None] = mapped_column(Float)  # 0-100
    wind_speed_kmh: Mapped[float | None] = mapped_column(Float)
    condition: Mapped[str] = mapped_column(String(20))


class PriceRecord(Base):
    """Grid price of one tick."""

    __tablename__ = "price_samples"
    __table_args__ = (Index("ix_price_samples_user_time", "user_id", "timestamp"),)

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    price_per_kwh: Mapped[float] = mapped_column(Float, nullable=False)
    tier: Mapped[str] = mapped_column(String(20), nullable=False)
