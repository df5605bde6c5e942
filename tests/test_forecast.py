"""Tests for the forecast engine and its trend fallback."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import joblib
import numpy as np
import pytest
from sklearn.linear_model import LinearRegression

from homewatt.engine.forecast import (
    FALLBACK_MODEL_NAME,
    Confidence,
    FeatureVector,
    ForecastEngine,
    JoblibForecastModel,
    fallback_forecast,
    load_forecast_engine,
)


def train_constant_model(path, value: float, width: int = 12):
    """A regressor that always predicts ``value`` kWh/day."""
    rng = np.random.default_rng(0)
    X = rng.random((40, width))
    model = LinearRegression().fit(X, np.full(40, value))
    joblib.dump(model, path)
    return path


class TestFallbackForecast:
    def test_trend_formula(self, make_context):
        ctx = make_context(avg_daily_consumption=30.0, avg_daily_solar=5.0, growth_rate=0.1)
        result = fallback_forecast(ctx)

        assert result.next_month_consumption == pytest.approx(990.0)
        assert result.next_month_solar == pytest.approx(157.5)
        assert result.next_month_cost == pytest.approx(118.8)
        assert result.daily_consumption == pytest.approx(33.0)
        assert result.confidence == Confidence.MEDIUM
        assert result.model == FALLBACK_MODEL_NAME

    def test_engine_without_model_uses_fallback(self, make_context):
        ctx = make_context()
        assert ForecastEngine().forecast(ctx) == fallback_forecast(ctx)

    def test_to_dict_rounds(self, make_context):
        ctx = make_context(avg_daily_consumption=10.0 / 3)
        data = fallback_forecast(ctx).to_dict()
        assert data["next_month_consumption"] == 100.0
        assert data["confidence"] == "medium"


class TestFeatureVector:
    def test_width(self):
        assert FeatureVector.width() == 12

    def test_normalisation(self, make_context):
        ctx = make_context(
            peak_hour=23,
            home_size_sqft=2500.0,
            reference_time=datetime(2026, 6, 13, 9, tzinfo=UTC),  # Saturday
        )
        vector = FeatureVector.from_context(ctx)
        assert vector.peak_hour == 1.0
        assert vector.home_size == 0.5
        assert vector.month == 0.5
        assert vector.is_weekend == 1.0
        assert vector.as_array().shape == (1, 12)

    def test_unknown_values_are_zero(self, make_context):
        vector = FeatureVector.from_context(
            make_context(peak_hour=None, home_size_sqft="unknown", reference_time=None)
        )
        assert vector.peak_hour == 0.0
        assert vector.home_size == 0.0
        assert vector.month == 0.0


class TestPrimaryModel:
    def test_joblib_model_prediction(self, tmp_path, make_context):
        path = train_constant_model(tmp_path / "model.joblib", 25.0)
        engine = load_forecast_engine(str(path))
        result = engine.forecast(make_context(avg_daily_consumption=30.0, avg_daily_solar=4.0))

        assert result.confidence == Confidence.HIGH
        assert result.model == "joblib:model.joblib"
        assert result.daily_consumption == pytest.approx(25.0)
        assert result.next_month_consumption == pytest.approx(750.0)
        assert result.next_month_cost == pytest.approx(90.0)
        # Solar still comes from the trend formula
        assert result.next_month_solar == pytest.approx(120.0)

    def test_width_mismatch_falls_back(self, tmp_path, make_context):
        path = train_constant_model(tmp_path / "narrow.joblib", 25.0, width=5)
        result = load_forecast_engine(str(path)).forecast(make_context())
        assert result.confidence == Confidence.MEDIUM
        assert result.model == FALLBACK_MODEL_NAME

    def test_missing_file_falls_back_and_is_not_retried(self, tmp_path, make_context):
        model = JoblibForecastModel(tmp_path / "missing.joblib")
        engine = ForecastEngine(model)
        with patch("homewatt.engine.forecast.joblib.load", side_effect=OSError("no file")) as load:
            first = engine.forecast(make_context())
            second = engine.forecast(make_context())

        assert first.model == second.model == FALLBACK_MODEL_NAME
        load.assert_called_once()

    def test_inference_error_falls_back(self, make_context):
        model = MagicMock()
        model.name = "broken"
        model.predict_daily.side_effect = RuntimeError("boom")
        result = ForecastEngine(model).forecast(make_context())
        assert result.model == FALLBACK_MODEL_NAME

    def test_negative_prediction_clamped(self, make_context):
        model = MagicMock()
        model.name = "pessimist"
        model.predict_daily.return_value = -4.0
        result = ForecastEngine(model).forecast(make_context())
        assert result.next_month_consumption == 0.0
        assert result.confidence == Confidence.HIGH

    def test_no_path_means_no_model(self):
        assert load_forecast_engine(None).model is None
        assert load_forecast_engine("").model is None
