"""Aggregated energy and solar logs."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Float, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from homewatt.database import Base


class EnergyLog(Base):
    """Consumption accumulated over one flush window."""

    __tablename__ = "energy_logs"
    __table_args__ = (Index("ix_energy_logs_user_time", "user_id", "logged_at"),)

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    logged_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    consumption_kwh: Mapped[float] = mapped_column(Float, nullable=False)


class SolarLog(Base):
    """Generation accumulated over one flush window."""

    __tablename__ = "solar_logs"
    __table_args__ = (Index("ix_solar_logs_user_time", "user_id", "logged_at"),)

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    logged_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    generation_kwh: Mapped[float] = mapped_column(Float, nullable=False)
    irradiance_wm2: Mapped[float | None] = mapped_column(Float)
