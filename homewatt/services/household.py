"""Profile and appliance lookups shared by the simulation and insight services."""

import logging
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from homewatt.config import get_settings
from homewatt.database import as_utc
from homewatt.engine.features import DEFAULT_OCCUPANTS, ProfileSettings
from homewatt.engine.load import DeviceState
from homewatt.models import (
    Appliance,
    EnergyLog,
    EnergySample,
    PriceRecord,
    Profile,
    SolarLog,
    WeatherRecord,
)

logger = logging.getLogger(__name__)

UTC_ZONE = ZoneInfo("UTC")


async def load_profile(db: AsyncSession, user_id: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def load_devices(db: AsyncSession, user_id: str) -> list[DeviceState]:
    result = await db.execute(
        select(Appliance).where(Appliance.user_id == user_id).order_by(Appliance.created_at)
    )
    return [appliance.to_device_state() for appliance in result.scalars().all()]


async def latest_data_time(db: AsyncSession, user_id: str) -> datetime | None:
    """Newest timestamp across the raw samples and aggregated logs of a household.

    Simulated clocks run ahead of wall time, so this can lie in the future.
    """
    columns = (
        (EnergySample.timestamp, EnergySample.user_id),
        (WeatherRecord.timestamp, WeatherRecord.user_id),
        (PriceRecord.timestamp, PriceRecord.user_id),
        (EnergyLog.logged_at, EnergyLog.user_id),
        (SolarLog.logged_at, SolarLog.user_id),
    )
    newest = None
    for column, owner in columns:
        result = await db.execute(select(func.max(column)).where(owner == user_id))
        value = result.scalar()
        if value is not None:
            value = as_utc(value)
            newest = value if newest is None else max(newest, value)
    return newest


def profile_settings(profile: Profile | None) -> ProfileSettings:
    """Model parameters for a profile, using configured defaults for missing values."""
    settings = get_settings()
    if profile is None:
        return ProfileSettings(
            electricity_rate=settings.default_electricity_rate,
            currency=settings.default_currency,
        )
    return ProfileSettings(
        electricity_rate=profile.electricity_rate or settings.default_electricity_rate,
        solar_capacity_kw=profile.solar_panel_capacity or 0.0,
        battery_capacity_kwh=profile.battery_capacity or 0.0,
        occupants=profile.occupants or DEFAULT_OCCUPANTS,
        home_size_sqft=profile.home_size_sqft,
        currency=profile.currency or settings.default_currency,
    )


def profile_timezone(profile: Profile | None) -> tzinfo:
    """Zone for local hour-of-day calculations; UTC when unset or unknown."""
    if profile is None or not profile.timezone:
        return UTC_ZONE
    try:
        return ZoneInfo(profile.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {profile.timezone!r} for {profile.user_id}, using UTC")
        return UTC_ZONE
