"""Time-of-day grid pricing policies.

Two policies exist on purpose. The standard policy scales the user's base
rate and drives the background simulation; the demo policy uses flat prices
and drives the interactive simulation. They are selected by simulation mode
and are not interchangeable.
"""

import enum
from dataclasses import dataclass
from datetime import datetime


class PriceTier(str, enum.Enum):
    """Price band of the grid tariff."""

    OFF_PEAK = "off-peak"
    STANDARD = "standard"
    MID_PEAK = "mid-peak"
    PEAK = "peak"


TIER_MULTIPLIERS: dict[PriceTier, float] = {
    PriceTier.OFF_PEAK: 0.90,
    PriceTier.STANDARD: 1.00,
    PriceTier.PEAK: 1.17,
}

OFF_PEAK_END_HOUR = 6
PEAK_START_HOUR = 18

DEMO_PRICES: dict[PriceTier, float] = {
    PriceTier.OFF_PEAK: 0.12,
    PriceTier.MID_PEAK: 0.15,
    PriceTier.PEAK: 0.25,
}


@dataclass(frozen=True)
class PriceSample:
    """Grid price at one simulated instant."""

    timestamp: datetime
    price_per_kwh: float
    tier: PriceTier


def standard_tier(hour: int) -> PriceTier:
    """Tier of the standard policy for an hour of day (0-23)."""
    if not 0 <= hour < 24:
        raise ValueError(f"hour must be in [0, 24), got {hour}")
    if hour < OFF_PEAK_END_HOUR:
        return PriceTier.OFF_PEAK
    if hour >= PEAK_START_HOUR:
        return PriceTier.PEAK
    return PriceTier.STANDARD


def standard_price(hour: int, base_rate: float) -> tuple[float, PriceTier]:
    """Price and tier of the standard policy."""
    tier = standard_tier(hour)
    return base_rate * TIER_MULTIPLIERS[tier], tier


def demo_tier(hour: int) -> PriceTier:
    """Tier of the interactive demo policy: 16-20 peak, 9-16 mid-peak."""
    if not 0 <= hour < 24:
        raise ValueError(f"hour must be in [0, 24), got {hour}")
    if 16 <= hour <= 20:
        return PriceTier.PEAK
    if 9 <= hour < 16:
        return PriceTier.MID_PEAK
    return PriceTier.OFF_PEAK


def demo_price(hour: int) -> tuple[float, PriceTier]:
    """Price and tier of the interactive demo policy."""
    tier = demo_tier(hour)
    return DEMO_PRICES[tier], tier
