"""Scenario-based recommendations.

Every scenario describes a hypothetical intervention as a fractional cut in
daily consumption. The engine forecasts the unchanged and the modified
context and turns the difference into a monthly saving. Savings thresholds
and priority cutoffs are named per scenario and are tunable.
"""

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace

from homewatt.engine.features import FeatureContext
from homewatt.engine.forecast import DAYS_PER_MONTH, ForecastEngine
from homewatt.engine.load import DeviceState, high_power_devices
from homewatt.engine.pricing import PriceSample, PriceTier
from homewatt.engine.weather import WeatherCondition, WeatherSample

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5

EVENING_PEAK_HOURS = range(16, 22)
SOLAR_INSTALL_MIN_DAILY_KWH = 20.0
SOLAR_INSTALL_MIN_IRRADIANCE = 400.0
DAYLIGHT_HOURS = range(6, 19)


class Priority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass(frozen=True)
class RecommendationInputs:
    """Everything a scenario may look at. Weather and price are optional."""

    context: FeatureContext
    devices: Sequence[DeviceState] = ()
    weather: WeatherSample | None = None
    price: PriceSample | None = None
    currency: str = "USD"


@dataclass(frozen=True)
class Recommendation:
    title: str
    description: str
    expected_savings_kwh: float
    expected_savings_currency: float
    priority: Priority
    category: str
    scenario: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "expected_savings_kwh": self.expected_savings_kwh,
            "expected_savings_currency": self.expected_savings_currency,
            "priority": self.priority.value,
            "category": self.category,
        }


@dataclass(frozen=True)
class Scenario:
    """One candidate intervention.

    ``high_priority_above`` is the monthly currency saving above which the
    recommendation is high priority; ``None`` makes it always high.
    """

    key: str
    category: str
    applies: Callable[[RecommendationInputs], bool]
    reduction: Callable[[RecommendationInputs], float]
    min_savings_kwh: float
    high_priority_above: float | None
    title: str
    description: str
    details: Callable[[RecommendationInputs], dict] = field(default=lambda inputs: {})

    def priority_for(self, savings_currency: float) -> Priority:
        if self.high_priority_above is None or savings_currency > self.high_priority_above:
            return Priority.HIGH
        return Priority.MEDIUM


def _has_usage(inputs: RecommendationInputs) -> bool:
    return inputs.context.avg_daily_consumption > 0


def _evening_peak(inputs: RecommendationInputs) -> bool:
    ctx = inputs.context
    return _has_usage(inputs) and ctx.peak_hour is not None and ctx.peak_hour in EVENING_PEAK_HOURS


def _has_heavy_appliance(inputs: RecommendationInputs) -> bool:
    return _has_usage(inputs) and bool(high_power_devices(inputs.devices))


def _heavy_appliance_details(inputs: RecommendationInputs) -> dict:
    largest = high_power_devices(inputs.devices)[0]
    return {"appliance": largest.name, "appliance_w": largest.power_rating_w}


def _uses_own_solar(inputs: RecommendationInputs) -> bool:
    ctx = inputs.context
    return _has_usage(inputs) and ctx.has_solar and ctx.avg_daily_solar > 0


def _self_consumption_share(inputs: RecommendationInputs) -> float:
    ctx = inputs.context
    return min(0.3, 0.2 * ctx.avg_daily_solar / ctx.avg_daily_consumption)


def _solar_install_candidate(inputs: RecommendationInputs) -> bool:
    ctx, weather = inputs.context, inputs.weather
    if ctx.has_solar or ctx.avg_daily_consumption <= SOLAR_INSTALL_MIN_DAILY_KWH:
        return False
    if weather is None:
        return False
    return (
        weather.irradiance_wm2 > SOLAR_INSTALL_MIN_IRRADIANCE
        and weather.timestamp.hour in DAYLIGHT_HOURS
        and weather.condition != WeatherCondition.CLOUDY
    )


def _peak_pricing_now(inputs: RecommendationInputs) -> bool:
    price = inputs.price
    return (
        _has_usage(inputs)
        and price is not None
        and price.tier == PriceTier.PEAK
        and inputs.context.peak_hour is not None
    )


def _peak_hour_details(inputs: RecommendationInputs) -> dict:
    return {"peak_hour": inputs.context.peak_hour}


SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        key="peak_load_shift",
        category="behavior",
        applies=_evening_peak,
        reduction=lambda inputs: 0.15,
        min_savings_kwh=10.0,
        high_priority_above=20.0,
        title="Shift usage away from {peak_hour:02d}:00",
        description=(
            "Your consumption peaks around {peak_hour:02d}:00. Running laundry, "
            "dishwashing and charging outside the evening peak could save about "
            "{savings_kwh:.0f} kWh ({savings_currency:.2f} {currency}) per month."
        ),
        details=_peak_hour_details,
    ),
    Scenario(
        key="appliance_upgrade",
        category="appliance",
        applies=_has_heavy_appliance,
        reduction=lambda inputs: 0.12,
        min_savings_kwh=15.0,
        high_priority_above=25.0,
        title="Upgrade your {appliance}",
        description=(
            "{appliance} draws {appliance_w:.0f} W. Replacing it with an efficient "
            "model or running it in eco mode could save about {savings_kwh:.0f} kWh "
            "({savings_currency:.2f} {currency}) per month."
        ),
        details=_heavy_appliance_details,
    ),
    Scenario(
        key="solar_self_consumption",
        category="solar",
        applies=_uses_own_solar,
        reduction=_self_consumption_share,
        min_savings_kwh=5.0,
        high_priority_above=30.0,
        title="Use more of your own solar power",
        description=(
            "Scheduling flexible loads between 11:00 and 15:00, when your panels "
            "produce most, could cut grid draw by about {savings_kwh:.0f} kWh "
            "({savings_currency:.2f} {currency}) per month."
        ),
    ),
    Scenario(
        key="solar_install",
        category="solar",
        applies=_solar_install_candidate,
        reduction=lambda inputs: 0.4,
        min_savings_kwh=50.0,
        high_priority_above=None,
        title="Consider installing solar panels",
        description=(
            "You use more than {min_daily:.0f} kWh a day and conditions right now "
            "are good for solar. A rooftop system could offset about "
            "{savings_kwh:.0f} kWh ({savings_currency:.2f} {currency}) per month."
        ),
        details=lambda inputs: {"min_daily": SOLAR_INSTALL_MIN_DAILY_KWH},
    ),
    Scenario(
        key="behavior_reduction",
        category="behavior",
        applies=_has_usage,
        reduction=lambda inputs: 0.05,
        min_savings_kwh=5.0,
        high_priority_above=40.0,
        title="Trim everyday consumption by 5%",
        description=(
            "Switching devices fully off instead of standby and lowering heating or "
            "cooling by one degree could save about {savings_kwh:.0f} kWh "
            "({savings_currency:.2f} {currency}) per month."
        ),
    ),
    Scenario(
        key="off_peak_reschedule",
        category="pricing",
        applies=_peak_pricing_now,
        reduction=lambda inputs: 0.10,
        min_savings_kwh=8.0,
        high_priority_above=20.0,
        title="Reschedule loads to off-peak hours",
        description=(
            "Peak pricing is active and your usage peaks around {peak_hour:02d}:00. "
            "Timers that move heavy loads to the night tariff could save about "
            "{savings_kwh:.0f} kWh ({savings_currency:.2f} {currency}) per month."
        ),
        details=_peak_hour_details,
    ),
)


def reduced_context(ctx: FeatureContext, reduction: float) -> FeatureContext:
    """Context after cutting daily consumption by ``reduction`` (0-1)."""
    reduction = min(1.0, max(0.0, reduction))
    cut = ctx.avg_daily_consumption * reduction
    return replace(
        ctx,
        avg_daily_consumption=ctx.avg_daily_consumption - cut,
        net_usage=ctx.net_usage - cut * DAYS_PER_MONTH,
    )


def estimate_savings(
    engine: ForecastEngine, ctx: FeatureContext, reduction: float
) -> tuple[float, float]:
    """Monthly (kWh, currency) saved by cutting daily consumption by ``reduction``."""
    baseline = engine.daily_consumption(ctx)
    modified = engine.daily_consumption(reduced_context(ctx, reduction))
    savings_kwh = max(0.0, baseline - modified) * DAYS_PER_MONTH
    return savings_kwh, savings_kwh * ctx.electricity_rate


class RecommendationEngine:
    def __init__(
        self,
        forecast_engine: ForecastEngine,
        scenarios: Sequence[Scenario] = SCENARIOS,
        limit: int = MAX_RECOMMENDATIONS,
    ):
        self.forecast_engine = forecast_engine
        self.scenarios = scenarios
        self.limit = limit

    def evaluate(self, scenario: Scenario, inputs: RecommendationInputs) -> Recommendation | None:
        """Run one scenario; None when it does not apply or saves too little."""
        if not scenario.applies(inputs):
            return None

        savings_kwh, savings_currency = estimate_savings(
            self.forecast_engine, inputs.context, scenario.reduction(inputs)
        )
        if savings_kwh < scenario.min_savings_kwh:
            logger.debug(
                f"Scenario {scenario.key} below threshold: {savings_kwh:.2f} kWh "
                f"< {scenario.min_savings_kwh}"
            )
            return None

        values = {
            "savings_kwh": savings_kwh,
            "savings_currency": savings_currency,
            "currency": inputs.currency,
            **scenario.details(inputs),
        }
        return Recommendation(
            title=scenario.title.format(**values),
            description=scenario.description.format(**values),
            expected_savings_kwh=round(savings_kwh, 2),
            expected_savings_currency=round(savings_currency, 2),
            priority=scenario.priority_for(savings_currency),
            category=scenario.category,
            scenario=scenario.key,
        )

    def generate(self, inputs: RecommendationInputs) -> list[Recommendation]:
        """Evaluate every scenario and keep the best ``limit`` by priority, then savings."""
        results = [
            rec
            for rec in (self.evaluate(scenario, inputs) for scenario in self.scenarios)
            if rec is not None
        ]
        results.sort(
            key=lambda r: (PRIORITY_RANK[r.priority], -r.expected_savings_currency)
        )
        return results[: self.limit]
