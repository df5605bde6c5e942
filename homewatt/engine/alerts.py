"""Threshold alerts raised from live simulation readings."""

import enum
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from homewatt.engine.pricing import PriceTier

HIGH_USAGE_KW = 6.0
PEAK_GRID_DRAW_KW = 3.0
EXCELLENT_SOLAR_KW = 6.0
ALERT_COOLDOWN = timedelta(hours=1)


class Severity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Reading:
    """Instantaneous values of one tick."""

    consumption_kw: float
    solar_kw: float
    grid_kw: float
    tier: PriceTier


@dataclass(frozen=True)
class Alert:
    key: str
    title: str
    message: str
    severity: Severity


@dataclass(frozen=True)
class AlertRule:
    key: str
    severity: Severity
    title: str
    triggered: Callable[[Reading], bool]
    message: Callable[[Reading], str]


ALERT_RULES: tuple[AlertRule, ...] = (
    AlertRule(
        key="high_usage",
        severity=Severity.WARNING,
        title="High Energy Usage Detected",
        triggered=lambda r: r.consumption_kw > HIGH_USAGE_KW,
        message=lambda r: (
            f"Current consumption is {r.consumption_kw:.1f} kW - consider reducing "
            "usage during peak hours."
        ),
    ),
    AlertRule(
        key="peak_pricing",
        severity=Severity.INFO,
        title="Peak Pricing Active",
        triggered=lambda r: r.tier == PriceTier.PEAK and r.grid_kw > PEAK_GRID_DRAW_KW,
        message=lambda r: (
            f"You're drawing {r.grid_kw:.1f} kW from the grid during peak hours. "
            "Consider using stored solar energy."
        ),
    ),
    AlertRule(
        key="excellent_solar",
        severity=Severity.INFO,
        title="Excellent Solar Production",
        triggered=lambda r: r.solar_kw > EXCELLENT_SOLAR_KW,
        message=lambda r: (
            f"Your solar panels are generating {r.solar_kw:.1f} kW - perfect "
            "conditions for energy storage!"
        ),
    ),
)


class AlertTracker:
    """Evaluates rules and suppresses repeats within the cooldown (simulated time)."""

    def __init__(self, rules: tuple[AlertRule, ...] = ALERT_RULES, cooldown: timedelta = ALERT_COOLDOWN):
        self.rules = rules
        self.cooldown = cooldown
        self._last_fired: dict[str, datetime] = {}

    def check(self, reading: Reading, at: datetime) -> list[Alert]:
        fired = []
        for rule in self.rules:
            if not rule.triggered(reading):
                continue
            last = self._last_fired.get(rule.key)
            if last is not None and at - last < self.cooldown:
                continue
            self._last_fired[rule.key] = at
            fired.append(Alert(rule.key, rule.title, rule.message(reading), rule.severity))
        return fired
