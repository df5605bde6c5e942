"""On-demand insight generation: aggregate history, forecast, recommend, persist."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from functools import lru_cache

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from homewatt import database
from homewatt.config import get_settings
from homewatt.database import as_utc
from homewatt.engine.features import (
    WINDOW_DAYS,
    FeatureContext,
    LogPoint,
    appliance_summary,
    build_feature_context,
)
from homewatt.engine.forecast import ForecastEngine, ForecastResult, load_forecast_engine
from homewatt.engine.insights import Insight, compose_insights
from homewatt.engine.load import DeviceState
from homewatt.engine.pricing import PriceSample, PriceTier
from homewatt.engine.recommendations import (
    Recommendation,
    RecommendationEngine,
    RecommendationInputs,
)
from homewatt.engine.weather import WeatherCondition, WeatherSample, condition_for
from homewatt.models import (
    EnergyLog,
    ForecastRecord,
    PriceRecord,
    RecommendationRecord,
    SolarLog,
    WeatherRecord,
)
from homewatt.services.household import (
    latest_data_time,
    load_devices,
    load_profile,
    profile_settings,
    profile_timezone,
)

logger = logging.getLogger(__name__)

FORECAST_TARGETS = ("consumption", "generation")


class InvalidInputError(ValueError):
    """A request to a service entry point was malformed."""


@lru_cache
def get_forecast_engine() -> ForecastEngine:
    """Forecast engine built from settings, shared by every request."""
    return load_forecast_engine(get_settings().forecast_model_path)


@dataclass
class InsightsReport:
    insights: list[Insight]
    recommendations: list[Recommendation]
    forecast: ForecastResult
    analytics: dict
    persisted: bool = True
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "insights": [i.to_dict() for i in self.insights],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "forecast": self.forecast.to_dict(),
            "analytics": self.analytics,
        }


async def _log_points(db: AsyncSession, model, value_column, user_id: str, since: datetime) -> list[LogPoint]:
    result = await db.execute(
        select(model.logged_at, value_column)
        .where(model.user_id == user_id, model.logged_at >= since)
        .order_by(model.logged_at)
    )
    return [LogPoint(as_utc(logged_at), kwh or 0.0) for logged_at, kwh in result.all()]


async def latest_weather(db: AsyncSession, user_id: str, tz: tzinfo) -> WeatherSample | None:
    result = await db.execute(
        select(WeatherRecord)
        .where(WeatherRecord.user_id == user_id)
        .order_by(WeatherRecord.timestamp.desc())
        .limit(1)
    )
    record = result.scalar_one_or_none()
    if record is None:
        return None
    try:
        condition = WeatherCondition(record.condition)
    except ValueError:
        condition = condition_for(record.cloud_cover or 0.0)
    return WeatherSample(
        timestamp=as_utc(record.timestamp).astimezone(tz),
        temperature_c=record.temperature_c or 0.0,
        cloud_cover=record.cloud_cover or 0.0,
        irradiance_wm2=record.irradiance_wm2 or 0.0,
        humidity=record.humidity or 0.0,
        wind_speed_kmh=record.wind_speed_kmh or 0.0,
        condition=condition,
    )


async def latest_price(db: AsyncSession, user_id: str) -> PriceSample | None:
    result = await db.execute(
        select(PriceRecord)
        .where(PriceRecord.user_id == user_id)
        .order_by(PriceRecord.timestamp.desc())
        .limit(1)
    )
    record = result.scalar_one_or_none()
    if record is None:
        return None
    try:
        tier = PriceTier(record.tier)
    except ValueError:
        logger.warning(f"Unknown price tier {record.tier!r} for {user_id}")
        return None
    return PriceSample(as_utc(record.timestamp), record.price_per_kwh, tier)


async def replace_recommendations(
    db: AsyncSession, user_id: str, recommendations: Sequence[Recommendation]
) -> None:
    """Delete every stored recommendation of the user, then insert the new set."""
    await db.execute(delete(RecommendationRecord).where(RecommendationRecord.user_id == user_id))
    db.add_all(
        RecommendationRecord(
            user_id=user_id,
            title=rec.title,
            description=rec.description,
            expected_savings_kwh=rec.expected_savings_kwh,
            expected_savings_currency=rec.expected_savings_currency,
            priority=rec.priority.value,
            category=rec.category,
        )
        for rec in recommendations
    )


async def replace_forecasts(
    db: AsyncSession, user_id: str, forecast: ForecastResult, now: datetime
) -> None:
    """Delete-then-insert one forecast row per target."""
    period_end = now + timedelta(days=WINDOW_DAYS)
    values = {
        "consumption": forecast.next_month_consumption,
        "generation": forecast.next_month_solar,
    }
    await db.execute(
        delete(ForecastRecord).where(
            ForecastRecord.user_id == user_id,
            ForecastRecord.target.in_(FORECAST_TARGETS),
        )
    )
    db.add_all(
        ForecastRecord(
            user_id=user_id,
            target=target,
            value=round(values[target], 2),
            period_start=now,
            period_end=period_end,
            model=forecast.model,
            confidence=forecast.confidence.value,
        )
        for target in FORECAST_TARGETS
    )


async def last_data_watermark(db: AsyncSession, user_id: str) -> datetime | None:
    """Newest data time the stored forecasts were generated from."""
    result = await db.execute(
        select(func.max(ForecastRecord.period_start)).where(ForecastRecord.user_id == user_id)
    )
    value = result.scalar()
    return as_utc(value) if value else None


async def last_generated_at(db: AsyncSession, user_id: str) -> datetime | None:
    result = await db.execute(
        select(func.max(ForecastRecord.created_at)).where(ForecastRecord.user_id == user_id)
    )
    value = result.scalar()
    return as_utc(value) if value else None


def build_analytics(
    ctx: FeatureContext, devices: Sequence[DeviceState], currency: str
) -> dict:
    monthly_kwh = ctx.avg_daily_consumption * WINDOW_DAYS
    return {
        "profile": {
            "home_size": ctx.home_size_sqft,
            "occupants": ctx.occupants,
            "solar_capacity": ctx.solar_capacity_kw,
            "battery_capacity": ctx.battery_capacity_kwh,
            "electricity_rate": ctx.electricity_rate,
            "currency": currency,
        },
        "usage": {
            "avg_daily_consumption": round(ctx.avg_daily_consumption, 2),
            "avg_daily_solar": round(ctx.avg_daily_solar, 2),
            "net_usage": round(ctx.net_usage, 2),
            "peak_usage_hour": ctx.peak_hour,
            "peak_usage_amount": (
                round(ctx.peak_hour_kwh, 2) if ctx.peak_hour_kwh is not None else None
            ),
            "growth_rate": round(ctx.growth_rate, 4),
        },
        "appliances": appliance_summary(devices),
        "monthly_cost": round(monthly_kwh * ctx.electricity_rate, 2),
    }


async def generate_insights(
    user_id: str | None,
    session_maker=None,
    engine: ForecastEngine | None = None,
    now: datetime | None = None,
) -> InsightsReport:
    """Compute and store insights, recommendations and forecasts for a household.

    Missing profile or history never fails the call; defaults apply. A
    failure to store the results is logged and reported on the returned
    report, not raised.

    Raises:
        InvalidInputError: if ``user_id`` is empty.
    """
    if not user_id or not str(user_id).strip():
        raise InvalidInputError("User ID is required")

    session_maker = session_maker or database.async_session_maker
    engine = engine or get_forecast_engine()
    now = now or database.utc_now()

    async with session_maker() as db:
        profile = await load_profile(db, user_id)
        devices = await load_devices(db, user_id)
        tz = profile_timezone(profile)
        # Simulated clocks run ahead of wall time; anchor the window on the newest data
        now = max(now, await latest_data_time(db, user_id) or now)
        since = now - timedelta(days=WINDOW_DAYS)
        energy = await _log_points(db, EnergyLog, EnergyLog.consumption_kwh, user_id, since)
        solar = await _log_points(db, SolarLog, SolarLog.generation_kwh, user_id, since)
        weather = await latest_weather(db, user_id, tz)
        price = await latest_price(db, user_id)

    settings = profile_settings(profile)
    ctx = build_feature_context(energy, solar, settings, now, tz)
    forecast = engine.forecast(ctx)
    recommendations = RecommendationEngine(engine).generate(
        RecommendationInputs(
            context=ctx,
            devices=devices,
            weather=weather,
            price=price,
            currency=settings.currency,
        )
    )
    insights = compose_insights(ctx, weather, price, settings.currency)

    report = InsightsReport(
        insights=insights,
        recommendations=recommendations,
        forecast=forecast,
        analytics=build_analytics(ctx, devices, settings.currency),
    )

    try:
        async with session_maker() as db:
            await replace_recommendations(db, user_id, recommendations)
            await replace_forecasts(db, user_id, forecast, now)
            await db.commit()
    except Exception as e:
        logger.error(f"Failed to store insights for {user_id}: {e}")
        report.persisted = False
        report.errors.append(str(e))

    logger.info(
        f"Generated {len(recommendations)} recommendations for {user_id} "
        f"({forecast.model}, confidence {forecast.confidence.value})"
    )
    return report
