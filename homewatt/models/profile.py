"""Household profile model."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from homewatt.database import Base, utc_now


class DataSource(str, enum.Enum):
    """Where a household's readings come from."""

    MANUAL = "manual"
    SIMULATION = "simulation"
    IOT = "iot"


class Profile(Base):
    """Per-user settings that parameterise the simulation and the forecasts."""

    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    electricity_rate: Mapped[float | None] = mapped_column(Float)  # currency per kWh
    solar_panel_capacity: Mapped[float | None] = mapped_column(Float)  # kW
    battery_capacity: Mapped[float | None] = mapped_column(Float)  # kWh
    occupants: Mapped[int | None] = mapped_column(Integer)
    home_size_sqft: Mapped[float | None] = mapped_column(Float)
    currency: Mapped[str | None] = mapped_column(String(3))
    timezone: Mapped[str | None] = mapped_column(String(64))
    data_source: Mapped[DataSource] = mapped_column(
        Enum(DataSource),
        default=DataSource.MANUAL,
        server_default=DataSource.MANUAL.name,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )
