"""Historical data backfill for households without history."""

import logging
import random
from datetime import datetime

from sqlalchemy import insert

from homewatt import database
from homewatt.engine.history import generate_history
from homewatt.models import EnergyLog, PriceRecord, SolarLog, WeatherRecord
from homewatt.services.household import load_profile, profile_timezone
from homewatt.services.insights import InvalidInputError

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000
MAX_DAYS_BACK = 365
DEFAULT_SOLAR_CAPACITY_KW = 5.0
DEFAULT_RATE = 0.12


async def backfill_history(
    user_id: str,
    days_back: int = 90,
    session_maker=None,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> dict[str, int]:
    """Write ``days_back`` days of hourly synthetic history. Returns rows created per table."""
    if not user_id:
        raise InvalidInputError("user_id is required")
    if not 1 <= days_back <= MAX_DAYS_BACK:
        raise InvalidInputError(f"days_back must be between 1 and {MAX_DAYS_BACK}")

    session_maker = session_maker or database.async_session_maker
    now = now or database.utc_now()

    async with session_maker() as db:
        profile = await load_profile(db, user_id)

    capacity = (profile.solar_panel_capacity if profile else None) or DEFAULT_SOLAR_CAPACITY_KW
    rate = (profile.electricity_rate if profile else None) or DEFAULT_RATE
    tz = profile_timezone(profile)

    rows: dict[type, list[dict]] = {EnergyLog: [], SolarLog: [], WeatherRecord: [], PriceRecord: []}
    for record in generate_history(now, days_back, capacity, rate, tz, rng):
        rows[EnergyLog].append(
            {"user_id": user_id, "logged_at": record.timestamp, "consumption_kwh": record.consumption_kwh}
        )
        if record.generation_kwh > 0:
            rows[SolarLog].append(
                {
                    "user_id": user_id,
                    "logged_at": record.timestamp,
                    "generation_kwh": record.generation_kwh,
                    "irradiance_wm2": record.irradiance_wm2,
                }
            )
        rows[WeatherRecord].append(
            {
                "user_id": user_id,
                "timestamp": record.timestamp,
                "temperature_c": record.temperature_c,
                "cloud_cover": record.cloud_cover,
                "irradiance_wm2": record.irradiance_wm2,
                "humidity": record.humidity,
                "wind_speed_kmh": record.wind_speed_kmh,
                "condition": record.condition.value,
            }
        )
        rows[PriceRecord].append(
            {
                "user_id": user_id,
                "timestamp": record.timestamp,
                "price_per_kwh": record.price_per_kwh,
                "tier": record.tier.value,
            }
        )

    logger.info(f"Backfilling {days_back} days of history for {user_id}")
    async with session_maker() as db:
        for model, values in rows.items():
            for start in range(0, len(values), BATCH_SIZE):
                await db.execute(insert(model), values[start : start + BATCH_SIZE])
        await db.commit()

    created = {model.__tablename__: len(values) for model, values in rows.items()}
    logger.info(f"Backfill complete for {user_id}: {created}")
    return created
