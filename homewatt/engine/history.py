"""Synthetic hourly history used to seed new households."""

import math
import random
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from homewatt.engine.pricing import PriceTier
from homewatt.engine.weather import WeatherCondition

CLOUD_MIN = 0.1
CLOUD_SPREAD = 0.4
WEEKEND_FACTOR = 1.2

# Backfill tariff: peaks follow the household's busy dayparts
BACKFILL_MULTIPLIERS = {
    PriceTier.PEAK: 1.5,
    PriceTier.OFF_PEAK: 0.7,
    PriceTier.STANDARD: 1.0,
}


@dataclass(frozen=True)
class HourRecord:
    timestamp: datetime
    consumption_kwh: float
    generation_kwh: float
    irradiance_wm2: float
    temperature_c: float
    cloud_cover: float
    humidity: float
    wind_speed_kmh: float
    condition: WeatherCondition
    price_per_kwh: float
    tier: PriceTier


def season_wave(day_of_year: int) -> float:
    """-1 in midwinter to 1 in midsummer (northern hemisphere)."""
    return math.sin(day_of_year / 365 * 2 * math.pi - math.pi / 2)


def seasonal_factor(day_of_year: int) -> float:
    return 0.7 + 0.3 * season_wave(day_of_year)


def _daypart(hour: int) -> str:
    if 6 <= hour <= 9:
        return "morning"
    if 17 <= hour <= 22:
        return "evening"
    if hour >= 23 or hour <= 5:
        return "night"
    return "day"


def hourly_consumption(hour: int, weekend: bool, rng: random.Random) -> float:
    daypart = _daypart(hour)
    if daypart == "morning":
        kw = 3.5 + rng.random() * 1.5
    elif daypart == "evening":
        kw = 4.0 + rng.random() * 2.0
    elif daypart == "night":
        kw = 0.8 + rng.random() * 0.4
    else:
        kw = 2.0 + rng.random() * 1.0
    return kw * WEEKEND_FACTOR if weekend else kw


def backfill_tier(hour: int) -> PriceTier:
    daypart = _daypart(hour)
    if daypart in ("morning", "evening"):
        return PriceTier.PEAK
    if daypart == "night":
        return PriceTier.OFF_PEAK
    return PriceTier.STANDARD


def generate_history(
    end: datetime,
    days_back: int,
    solar_capacity_kw: float,
    electricity_rate: float,
    tz: tzinfo,
    rng: random.Random | None = None,
) -> Iterator[HourRecord]:
    """Yield one record per hour for ``days_back`` days ending before ``end``, oldest first."""
    rng = rng or random.Random()
    for h in range(days_back * 24, 0, -1):
        timestamp = end - timedelta(hours=h)
        local = timestamp.astimezone(tz)
        hour = local.hour
        day_of_year = local.timetuple().tm_yday
        weekend = local.weekday() >= 5

        cloud = CLOUD_MIN + rng.random() * CLOUD_SPREAD
        irradiance = 0.0
        generation = 0.0
        if 6 <= hour <= 18:
            time_of_day = max(0.0, 1 - (abs(hour - 12) / 6) ** 2)
            irradiance = 1000 * time_of_day * (1 - cloud * 0.7) * seasonal_factor(day_of_year)
            generation = solar_capacity_kw * irradiance / 1000 * (0.85 + rng.random() * 0.15)

        base_temp = 15 + 10 * season_wave(day_of_year)
        temperature = base_temp + 8 * math.sin((hour - 6) / 24 * 2 * math.pi) + (rng.random() - 0.5) * 3

        tier = backfill_tier(hour)
        yield HourRecord(
            timestamp=timestamp,
            consumption_kwh=round(hourly_consumption(hour, weekend, rng), 3),
            generation_kwh=round(generation, 3),
            irradiance_wm2=round(irradiance, 2),
            temperature_c=round(temperature, 2),
            cloud_cover=round(cloud, 3),
            humidity=float(40 + round(rng.random() * 40)),
            wind_speed_kmh=round(5 + rng.random() * 20, 1),
            condition=(
                WeatherCondition.CLOUDY
                if cloud > 0.6
                else WeatherCondition.PARTLY_CLOUDY if cloud > 0.3 else WeatherCondition.SUNNY
            ),
            price_per_kwh=round(electricity_rate * BACKFILL_MULTIPLIERS[tier], 4),
            tier=tier,
        )
