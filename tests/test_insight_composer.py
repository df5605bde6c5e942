"""Tests for plain-language insight composition."""

from datetime import UTC, datetime

import pytest

from homewatt.engine.insights import CO2_KG_PER_KWH, compose_insights, solar_quality
from homewatt.engine.pricing import PriceSample, PriceTier
from homewatt.engine.weather import WeatherCondition, WeatherSample


def titles(insights):
    return [i.title for i in insights]


class TestComposeInsights:
    def test_empty_history(self, make_context):
        ctx = make_context(avg_daily_consumption=0.0, peak_hour=None)
        assert compose_insights(ctx) == []

    def test_usage_and_cost(self, make_context):
        insights = compose_insights(make_context(), currency="EUR")
        assert titles(insights) == ["Peak usage hour", "Estimated monthly cost"]
        assert "12:00" in insights[0].description
        assert "108.00 EUR" in insights[1].description

    def test_solar_share_and_co2(self, make_context):
        ctx = make_context(avg_daily_solar=10.0, solar_capacity_kw=5.0)
        insights = compose_insights(ctx)
        by_title = {i.title: i for i in insights}

        assert "33%" in by_title["Solar contribution"].description
        co2 = 10.0 * 30 * CO2_KG_PER_KWH
        assert f"{co2:.1f} kg" in by_title["CO₂ avoided"].description

    def test_current_conditions(self, make_context):
        weather = WeatherSample(
            timestamp=datetime(2026, 6, 10, 12, tzinfo=UTC),
            temperature_c=25.0,
            cloud_cover=0.1,
            irradiance_wm2=820.0,
            humidity=45.0,
            wind_speed_kmh=8.0,
            condition=WeatherCondition.SUNNY,
        )
        price = PriceSample(datetime(2026, 6, 10, 12, tzinfo=UTC), 0.25, PriceTier.PEAK)
        insights = compose_insights(make_context(), weather, price)

        categories = [i.category for i in insights]
        assert categories[-2:] == ["solar", "pricing"]
        assert "excellent" in insights[-2].description
        assert "postpone" in insights[-1].description

    def test_no_solar_conditions_at_night(self, make_context):
        weather = WeatherSample(
            timestamp=datetime(2026, 6, 10, 23, tzinfo=UTC),
            temperature_c=18.0,
            cloud_cover=0.1,
            irradiance_wm2=0.0,
            humidity=60.0,
            wind_speed_kmh=4.0,
            condition=WeatherCondition.SUNNY,
        )
        assert "Current solar conditions" not in titles(compose_insights(make_context(), weather))


@pytest.mark.parametrize(
    "irradiance,quality",
    [(900, "excellent"), (700, "excellent"), (500, "good"), (100, "moderate")],
)
def test_solar_quality(irradiance, quality):
    assert solar_quality(irradiance) == quality
