"""Weather and solar production models."""

import enum
import math
import random
from dataclasses import dataclass
from datetime import datetime

PANEL_EFFICIENCY = 0.17

# Canonical irradiance envelope (W/m²)
SUNRISE_HOUR = 6
SUNSET_HOUR = 18
RAMP_UP_END_HOUR = 11
PLATEAU_END_HOUR = 14
RAMP_PEAK_WM2 = 800.0
PLATEAU_MAX_WM2 = 1000.0

# Interactive demo curve
DEMO_SOLAR_PEAK_KW = 5.0
DEMO_CLOUD_ATTENUATION = 0.7


class WeatherCondition(str, enum.Enum):
    """Categorical sky condition derived from cloud cover."""

    SUNNY = "sunny"
    PARTLY_CLOUDY = "partly-cloudy"
    CLOUDY = "cloudy"


@dataclass(frozen=True)
class WeatherSample:
    """Weather at one simulated instant."""

    timestamp: datetime
    temperature_c: float
    cloud_cover: float  # 0-1
    irradiance_wm2: float
    humidity: float  # 0-100
    wind_speed_kmh: float
    condition: WeatherCondition


def clamp_cloud(cloud_cover: float) -> float:
    """Clamp a cloud cover ratio into [0, 1]."""
    return min(1.0, max(0.0, cloud_cover))


def fractional_hour(moment: datetime) -> float:
    """Hour of day including minutes, e.g. 13:30 -> 13.5."""
    return moment.hour + moment.minute / 60 + moment.second / 3600


def condition_for(cloud_cover: float) -> WeatherCondition:
    """Bucket cloud cover into a sky condition."""
    if cloud_cover < 0.3:
        return WeatherCondition.SUNNY
    if cloud_cover < 0.7:
        return WeatherCondition.PARTLY_CLOUDY
    return WeatherCondition.CLOUDY


def solar_irradiance(hour: float, cloud_cover: float, rng: random.Random | None = None) -> float:
    """Irradiance in W/m² for an hour of day (fractional allowed).

    Zero outside 06:00-18:00, a linear ramp to 800 W/m² until 11:00, a
    jittered 800-1000 W/m² plateau until 14:00, then a linear ramp back to
    zero at 18:00. Everything is scaled by the clear-sky fraction.
    """
    if hour < SUNRISE_HOUR or hour > SUNSET_HOUR:
        return 0.0

    clear_sky = 1.0 - clamp_cloud(cloud_cover)
    if hour < RAMP_UP_END_HOUR:
        base = RAMP_PEAK_WM2 * (hour - SUNRISE_HOUR) / (RAMP_UP_END_HOUR - SUNRISE_HOUR)
    elif hour <= PLATEAU_END_HOUR:
        base = (rng or random).uniform(RAMP_PEAK_WM2, PLATEAU_MAX_WM2)
    else:
        base = RAMP_PEAK_WM2 * (SUNSET_HOUR - hour) / (SUNSET_HOUR - PLATEAU_END_HOUR)

    return max(0.0, min(PLATEAU_MAX_WM2, base * clear_sky))


def solar_power_kw(
    irradiance_wm2: float, capacity_kw: float, efficiency: float = PANEL_EFFICIENCY
) -> float:
    """Convert irradiance into panel output for the configured capacity."""
    if capacity_kw <= 0 or irradiance_wm2 <= 0:
        return 0.0
    return capacity_kw * (irradiance_wm2 / 1000) * efficiency


def demo_solar_power_kw(hour: float, cloud_cover: float) -> float:
    """Sinusoidal day-progress curve used by the interactive demo."""
    if hour < SUNRISE_HOUR or hour > SUNSET_HOUR:
        return 0.0
    day_progress = (hour - SUNRISE_HOUR) / (SUNSET_HOUR - SUNRISE_HOUR)
    curve = math.sin(day_progress * math.pi)
    attenuation = 1 - clamp_cloud(cloud_cover) * DEMO_CLOUD_ATTENUATION
    return max(0.0, curve * DEMO_SOLAR_PEAK_KW * attenuation)


class WeatherModel:
    """Produces one weather sample per tick as a bounded random walk."""

    def __init__(
        self,
        rng: random.Random | None = None,
        cloud_cover: float = 0.3,
        temperature_c: float = 22.0,
    ):
        self._rng = rng or random.Random()
        self.cloud_cover = clamp_cloud(cloud_cover)
        self.temperature_c = temperature_c

    def sample(self, local_time: datetime) -> WeatherSample:
        """Advance the walk and return the weather at ``local_time``."""
        rng = self._rng
        hour = fractional_hour(local_time)

        self.cloud_cover = clamp_cloud(self.cloud_cover + (rng.random() - 0.5) * 0.1)
        diurnal = 20 + math.sin((hour - 6) / 24 * 2 * math.pi) * 8
        # Drift towards the diurnal curve so temperature stays plausible
        self.temperature_c += (diurnal - self.temperature_c) * 0.2 + (rng.random() - 0.5) * 0.5

        return WeatherSample(
            timestamp=local_time,
            temperature_c=round(self.temperature_c, 2),
            cloud_cover=round(self.cloud_cover, 3),
            irradiance_wm2=round(solar_irradiance(hour, self.cloud_cover, rng), 2),
            humidity=float(40 + round(rng.random() * 40)),
            wind_speed_kmh=round(5 + rng.random() * 20, 1),
            condition=condition_for(self.cloud_cover),
        )
