"""Plain-language insights from the feature context and current conditions."""

from dataclasses import dataclass

from homewatt.engine.features import FeatureContext
from homewatt.engine.forecast import DAYS_PER_MONTH
from homewatt.engine.pricing import PriceSample, PriceTier
from homewatt.engine.weather import WeatherSample

CO2_KG_PER_KWH = 0.233

EXCELLENT_IRRADIANCE = 700
GOOD_IRRADIANCE = 400


@dataclass(frozen=True)
class Insight:
    title: str
    description: str
    category: str  # usage_pattern | cost | solar | pricing

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "category": self.category}


def solar_quality(irradiance_wm2: float) -> str:
    if irradiance_wm2 >= EXCELLENT_IRRADIANCE:
        return "excellent"
    if irradiance_wm2 >= GOOD_IRRADIANCE:
        return "good"
    return "moderate"


def compose_insights(
    ctx: FeatureContext,
    weather: WeatherSample | None = None,
    price: PriceSample | None = None,
    currency: str = "USD",
) -> list[Insight]:
    insights: list[Insight] = []

    if ctx.peak_hour is not None:
        insights.append(
            Insight(
                title="Peak usage hour",
                description=(
                    f"Most of your consumption happens around {ctx.peak_hour:02d}:00."
                ),
                category="usage_pattern",
            )
        )

    if ctx.avg_daily_consumption > 0:
        monthly_kwh = ctx.avg_daily_consumption * DAYS_PER_MONTH
        insights.append(
            Insight(
                title="Estimated monthly cost",
                description=(
                    f"At {ctx.avg_daily_consumption:.1f} kWh per day you use about "
                    f"{monthly_kwh:.0f} kWh a month, roughly "
                    f"{monthly_kwh * ctx.electricity_rate:.2f} {currency}."
                ),
                category="cost",
            )
        )

    if ctx.avg_daily_solar > 0 and ctx.avg_daily_consumption > 0:
        share = ctx.avg_daily_solar / ctx.avg_daily_consumption * 100
        insights.append(
            Insight(
                title="Solar contribution",
                description=f"Solar covers {share:.0f}% of your consumption.",
                category="solar",
            )
        )

    if ctx.avg_daily_solar > 0:
        co2 = ctx.avg_daily_solar * DAYS_PER_MONTH * CO2_KG_PER_KWH
        insights.append(
            Insight(
                title="CO₂ avoided",
                description=f"Your panels avoid about {co2:.1f} kg of CO₂ a month.",
                category="solar",
            )
        )

    if weather is not None and weather.irradiance_wm2 > 0:
        quality = solar_quality(weather.irradiance_wm2)
        insights.append(
            Insight(
                title="Current solar conditions",
                description=(
                    f"Solar conditions are {quality} right now "
                    f"({weather.irradiance_wm2:.0f} W/m², {weather.condition.value})."
                ),
                category="solar",
            )
        )

    if price is not None:
        advice = {
            PriceTier.PEAK: "postpone heavy loads if you can",
            PriceTier.MID_PEAK: "flexible loads are cheaper later tonight",
            PriceTier.OFF_PEAK: "a good time to run heavy appliances",
            PriceTier.STANDARD: "prices are at the normal rate",
        }[price.tier]
        insights.append(
            Insight(
                title="Current grid price",
                description=(
                    f"Grid electricity is {price.tier.value} at "
                    f"{price.price_per_kwh:.4f} {currency}/kWh; {advice}."
                ),
                category="pricing",
            )
        )

    return insights
