"""Reduction of stored history into the feature context used for forecasting."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from homewatt.engine.load import DeviceState

WINDOW_DAYS = 30
GROWTH_RATE_LIMIT = 0.15

DEFAULT_ELECTRICITY_RATE = 0.12
DEFAULT_OCCUPANTS = 1
UNKNOWN_HOME_SIZE = "unknown"


@dataclass(frozen=True)
class LogPoint:
    """One aggregated log row: when, and how many kWh."""

    logged_at: datetime
    kwh: float


@dataclass(frozen=True)
class ProfileSettings:
    """Profile fields the models read. Missing values fall back to defaults."""

    electricity_rate: float = DEFAULT_ELECTRICITY_RATE
    solar_capacity_kw: float = 0.0
    battery_capacity_kwh: float = 0.0
    occupants: int = DEFAULT_OCCUPANTS
    home_size_sqft: float | None = None
    currency: str = "USD"


@dataclass(frozen=True)
class FeatureContext:
    """Numeric summary of a household's last 30 days."""

    avg_daily_consumption: float
    avg_daily_solar: float
    net_usage: float
    peak_hour: int | None
    occupants: int
    home_size_sqft: float | str
    solar_capacity_kw: float
    battery_capacity_kwh: float
    electricity_rate: float
    growth_rate: float
    reference_time: datetime | None = None
    peak_hour_kwh: float | None = None

    @property
    def has_solar(self) -> bool:
        return self.solar_capacity_kw > 0


def clamp_growth(rate: float) -> float:
    return max(-GROWTH_RATE_LIMIT, min(GROWTH_RATE_LIMIT, rate))


def growth_rate(first_half: float, second_half: float) -> float:
    """Relative change between the two halves of the window, clamped to ±15%."""
    if first_half == 0:
        return 0.0
    return clamp_growth((second_half - first_half) / first_half)


def peak_hour(points: Iterable[LogPoint], tz: tzinfo | None = None) -> tuple[int | None, float | None]:
    """Hour of day with the largest summed consumption.

    Ties go to the earliest hour. No hour when nothing was consumed.
    """
    histogram = [0.0] * 24
    for point in points:
        moment = point.logged_at.astimezone(tz) if tz and point.logged_at.tzinfo else point.logged_at
        histogram[moment.hour] += point.kwh

    best = max(range(24), key=lambda h: (histogram[h], -h))
    if histogram[best] <= 0:
        return None, None
    return best, histogram[best]


def _split_halves(points: Sequence[LogPoint], now: datetime, days: int) -> tuple[float, float]:
    midpoint = now - timedelta(days=days / 2)
    first = sum(p.kwh for p in points if p.logged_at < midpoint)
    second = sum(p.kwh for p in points if p.logged_at >= midpoint)
    return first, second


def build_feature_context(
    energy: Sequence[LogPoint],
    solar: Sequence[LogPoint],
    profile: ProfileSettings | None,
    now: datetime,
    tz: tzinfo | None = None,
    days: int = WINDOW_DAYS,
) -> FeatureContext:
    """Aggregate trailing-window logs and profile settings into a FeatureContext.

    ``energy`` and ``solar`` are expected to already be filtered to the
    window ending at ``now``; averages always divide by ``days`` so sparse
    history reads as low usage rather than being extrapolated.
    """
    profile = profile or ProfileSettings()

    total_consumption = sum(p.kwh for p in energy)
    total_solar = sum(p.kwh for p in solar)
    hour, hour_kwh = peak_hour(energy, tz)
    first, second = _split_halves(energy, now, days)

    return FeatureContext(
        avg_daily_consumption=total_consumption / days,
        avg_daily_solar=total_solar / days,
        net_usage=total_consumption - total_solar,
        peak_hour=hour,
        occupants=profile.occupants or DEFAULT_OCCUPANTS,
        home_size_sqft=profile.home_size_sqft or UNKNOWN_HOME_SIZE,
        solar_capacity_kw=profile.solar_capacity_kw or 0.0,
        battery_capacity_kwh=profile.battery_capacity_kwh or 0.0,
        electricity_rate=profile.electricity_rate or DEFAULT_ELECTRICITY_RATE,
        growth_rate=growth_rate(first, second),
        reference_time=now,
        peak_hour_kwh=hour_kwh,
    )


def appliance_summary(devices: Iterable[DeviceState]) -> list[dict]:
    """Plain-dict appliance list reported alongside the analytics."""
    return [
        {"name": d.name, "power_w": d.power_rating_w, "status": d.status.value}
        for d in devices
    ]
