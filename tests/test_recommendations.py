"""Tests for scenario-based recommendations."""

from datetime import UTC, datetime

import pytest

from homewatt.engine.forecast import ForecastEngine
from homewatt.engine.load import DeviceState, DeviceStatus
from homewatt.engine.pricing import PriceSample, PriceTier
from homewatt.engine.recommendations import (
    SCENARIOS,
    Priority,
    RecommendationEngine,
    RecommendationInputs,
    estimate_savings,
)
from homewatt.engine.weather import WeatherCondition, WeatherSample


def weather_at(hour: int, irradiance: float, condition=WeatherCondition.SUNNY) -> WeatherSample:
    return WeatherSample(
        timestamp=datetime(2026, 6, 10, hour, tzinfo=UTC),
        temperature_c=24.0,
        cloud_cover=0.1,
        irradiance_wm2=irradiance,
        humidity=50.0,
        wind_speed_kmh=10.0,
        condition=condition,
    )


def peak_price() -> PriceSample:
    return PriceSample(datetime(2026, 6, 10, 18, tzinfo=UTC), 0.234, PriceTier.PEAK)


@pytest.fixture
def engine():
    return RecommendationEngine(ForecastEngine())


def scenarios_of(recommendations):
    return [r.scenario for r in recommendations]


class TestSavingsEstimate:
    def test_savings_monotonic_in_reduction(self, make_context):
        ctx = make_context()
        forecaster = ForecastEngine()
        previous = -1.0
        for reduction in (0.0, 0.05, 0.1, 0.2, 0.4, 1.0):
            kwh, currency = estimate_savings(forecaster, ctx, reduction)
            assert kwh >= 0.0
            assert kwh >= previous
            assert currency == pytest.approx(kwh * ctx.electricity_rate)
            previous = kwh

    def test_savings_in_kwh_per_month(self, make_context):
        kwh, currency = estimate_savings(ForecastEngine(), make_context(), 0.05)
        assert kwh == pytest.approx(45.0)
        assert currency == pytest.approx(5.4)


class TestScenarioGates:
    def test_no_usage_no_recommendations(self, engine, make_context):
        ctx = make_context(avg_daily_consumption=0.0, net_usage=0.0)
        assert engine.generate(RecommendationInputs(context=ctx)) == []

    def test_baseline_household(self, engine, make_context):
        recs = engine.generate(RecommendationInputs(context=make_context()))
        assert scenarios_of(recs) == ["behavior_reduction"]
        assert recs[0].priority == Priority.MEDIUM
        assert recs[0].expected_savings_kwh == 45.0

    def test_savings_threshold(self, engine, make_context):
        ctx = make_context(avg_daily_consumption=2.0)
        assert engine.generate(RecommendationInputs(context=ctx)) == []

    def test_evening_peak_shift(self, engine, make_context):
        recs = engine.generate(RecommendationInputs(context=make_context(peak_hour=18)))
        shift = next(r for r in recs if r.scenario == "peak_load_shift")
        assert shift.expected_savings_kwh == pytest.approx(135.0)
        assert shift.priority == Priority.MEDIUM
        assert "18:00" in shift.title

    def test_peak_shift_priority_cutoff(self, engine, make_context):
        ctx = make_context(peak_hour=18, electricity_rate=0.20)
        recs = engine.generate(RecommendationInputs(context=ctx))
        assert recs[0].scenario == "peak_load_shift"
        assert recs[0].priority == Priority.HIGH

    def test_appliance_upgrade_needs_heavy_device(self, engine, make_context):
        light = [DeviceState("1", "Lamp", 60.0, DeviceStatus.ON)]
        heavy = light + [DeviceState("2", "Dryer", 3000.0, DeviceStatus.OFF)]

        recs = engine.generate(RecommendationInputs(context=make_context(), devices=light))
        assert "appliance_upgrade" not in scenarios_of(recs)

        recs = engine.generate(RecommendationInputs(context=make_context(), devices=heavy))
        upgrade = next(r for r in recs if r.scenario == "appliance_upgrade")
        assert upgrade.title == "Upgrade your Dryer"
        assert upgrade.expected_savings_kwh == pytest.approx(108.0)

    def test_solar_self_consumption(self, engine, make_context):
        ctx = make_context(avg_daily_solar=10.0, solar_capacity_kw=5.0)
        recs = engine.generate(RecommendationInputs(context=ctx))
        solar = next(r for r in recs if r.scenario == "solar_self_consumption")
        assert solar.category == "solar"
        assert solar.expected_savings_kwh == pytest.approx(60.0)

    @pytest.mark.parametrize(
        "overrides,weather,expected",
        [
            ({}, weather_at(12, 650.0), True),
            ({}, weather_at(12, 650.0, WeatherCondition.CLOUDY), False),
            ({}, weather_at(12, 300.0), False),
            ({}, weather_at(20, 650.0), False),
            ({}, None, False),
            ({"solar_capacity_kw": 3.0}, weather_at(12, 650.0), False),
            ({"avg_daily_consumption": 18.0}, weather_at(12, 650.0), False),
        ],
    )
    def test_solar_install_gate(self, engine, make_context, overrides, weather, expected):
        ctx = make_context(**{"avg_daily_consumption": 25.0, **overrides})
        recs = engine.generate(RecommendationInputs(context=ctx, weather=weather))
        assert ("solar_install" in scenarios_of(recs)) is expected

    def test_solar_install_always_high(self, engine, make_context):
        ctx = make_context(avg_daily_consumption=25.0)
        recs = engine.generate(RecommendationInputs(context=ctx, weather=weather_at(12, 650.0)))
        install = next(r for r in recs if r.scenario == "solar_install")
        assert install.priority == Priority.HIGH
        assert install.expected_savings_kwh == pytest.approx(300.0)

    def test_off_peak_reschedule_needs_peak_price(self, engine, make_context):
        recs = engine.generate(RecommendationInputs(context=make_context(), price=peak_price()))
        assert "off_peak_reschedule" in scenarios_of(recs)

        ctx = make_context(peak_hour=None)
        recs = engine.generate(RecommendationInputs(context=ctx, price=peak_price()))
        assert "off_peak_reschedule" not in scenarios_of(recs)


class TestRanking:
    def full_inputs(self, make_context):
        ctx = make_context(avg_daily_consumption=40.0, peak_hour=18, electricity_rate=0.20)
        return RecommendationInputs(
            context=ctx,
            devices=[DeviceState("1", "Heat pump", 2500.0, DeviceStatus.ON)],
            weather=weather_at(12, 650.0),
            price=peak_price(),
        )

    def test_sorted_by_priority_then_savings(self, engine, make_context):
        recs = engine.generate(self.full_inputs(make_context))
        assert scenarios_of(recs) == [
            "solar_install",
            "peak_load_shift",
            "appliance_upgrade",
            "off_peak_reschedule",
            "behavior_reduction",
        ]
        assert recs[-1].priority == Priority.MEDIUM

    def test_truncated_to_limit(self, make_context):
        engine = RecommendationEngine(ForecastEngine(), SCENARIOS, limit=3)
        recs = engine.generate(self.full_inputs(make_context))
        assert scenarios_of(recs) == ["solar_install", "peak_load_shift", "appliance_upgrade"]

    def test_to_dict(self, engine, make_context):
        data = engine.generate(RecommendationInputs(context=make_context()))[0].to_dict()
        assert set(data) == {
            "title",
            "description",
            "expected_savings_kwh",
            "expected_savings_currency",
            "priority",
            "category",
        }
        assert "USD" in data["description"]
