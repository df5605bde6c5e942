"""Tests for the weather and solar models."""

import random
from datetime import UTC, datetime

import pytest

from homewatt.engine.weather import (
    DEMO_SOLAR_PEAK_KW,
    WeatherCondition,
    WeatherModel,
    condition_for,
    demo_solar_power_kw,
    fractional_hour,
    solar_irradiance,
    solar_power_kw,
)


class TestSolarIrradiance:
    """Test the canonical irradiance envelope."""

    @pytest.mark.parametrize("hour", [0, 3, 5.99, 18.01, 23])
    def test_dark_outside_daylight(self, hour):
        assert solar_irradiance(hour, 0.0) == 0.0

    def test_morning_ramp(self):
        """Linear from 0 at 06:00 to 800 at 11:00."""
        assert solar_irradiance(6, 0.0) == 0.0
        assert solar_irradiance(8.5, 0.0) == pytest.approx(400.0)

    def test_plateau_is_jittered_between_800_and_1000(self):
        rng = random.Random(42)
        values = [solar_irradiance(12, 0.0, rng) for _ in range(200)]
        assert all(800 <= v <= 1000 for v in values)
        assert len(set(values)) > 1

    def test_afternoon_ramp(self):
        """Linear from 800 after 14:00 down to 0 at 18:00."""
        assert solar_irradiance(16, 0.0) == pytest.approx(400.0)
        assert solar_irradiance(18, 0.0) == pytest.approx(0.0)

    def test_cloud_cover_scales_output(self):
        assert solar_irradiance(8.5, 0.5) == pytest.approx(200.0)
        assert solar_irradiance(12, 1.0, random.Random(1)) == 0.0

    def test_never_exceeds_cap(self):
        rng = random.Random(3)
        for hour in range(24):
            assert 0.0 <= solar_irradiance(hour, 0.0, rng) <= 1000.0


class TestSolarPower:
    def test_panel_output(self):
        """5 kW at 1000 W/m² with 17% efficiency."""
        assert solar_power_kw(1000, 5.0) == pytest.approx(0.85)

    def test_no_capacity_no_output(self):
        assert solar_power_kw(900, 0.0) == 0.0

    def test_demo_curve_peaks_at_noon(self):
        assert demo_solar_power_kw(12, 0.0) == pytest.approx(DEMO_SOLAR_PEAK_KW)

    def test_demo_curve_cloud_attenuation(self):
        assert demo_solar_power_kw(12, 1.0) == pytest.approx(DEMO_SOLAR_PEAK_KW * 0.3)

    def test_demo_curve_dark_at_night(self):
        assert demo_solar_power_kw(5, 0.0) == 0.0
        assert demo_solar_power_kw(20, 0.0) == 0.0


class TestConditions:
    @pytest.mark.parametrize(
        "cloud,expected",
        [
            (0.0, WeatherCondition.SUNNY),
            (0.29, WeatherCondition.SUNNY),
            (0.3, WeatherCondition.PARTLY_CLOUDY),
            (0.69, WeatherCondition.PARTLY_CLOUDY),
            (0.7, WeatherCondition.CLOUDY),
        ],
    )
    def test_condition_thresholds(self, cloud, expected):
        assert condition_for(cloud) == expected

    def test_fractional_hour(self):
        assert fractional_hour(datetime(2026, 1, 1, 13, 30, tzinfo=UTC)) == 13.5


class TestWeatherModel:
    def test_cloud_cover_stays_in_range(self):
        model = WeatherModel(random.Random(5))
        start = datetime(2026, 6, 1, tzinfo=UTC)
        for minute in range(0, 60 * 24 * 7, 10):
            sample = model.sample(start.replace(hour=(minute // 60) % 24))
            assert 0.0 <= sample.cloud_cover <= 1.0
            assert sample.irradiance_wm2 >= 0.0

    def test_seeded_models_are_reproducible(self):
        moment = datetime(2026, 6, 1, 12, tzinfo=UTC)
        a = WeatherModel(random.Random(11))
        b = WeatherModel(random.Random(11))
        assert [a.sample(moment) for _ in range(5)] == [b.sample(moment) for _ in range(5)]

    def test_no_irradiance_at_night(self):
        model = WeatherModel(random.Random(2))
        sample = model.sample(datetime(2026, 6, 1, 2, tzinfo=UTC))
        assert sample.irradiance_wm2 == 0.0
