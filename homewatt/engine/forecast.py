"""Next-month consumption and solar forecasting.

The primary path feeds a fixed, named feature vector to a pre-trained
regression model (any estimator with ``predict`` serialised with joblib).
When no model is configured, or it cannot be loaded or used, the trend
formula takes over and confidence drops to "medium".
"""

import enum
import logging
from dataclasses import astuple, dataclass, fields
from pathlib import Path
from typing import Protocol

import joblib
import numpy as np

from homewatt.engine.features import FeatureContext

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30
SOLAR_GROWTH_WEIGHT = 0.5
HOME_SIZE_SCALE_SQFT = 5000.0
FALLBACK_MODEL_NAME = "trend-fallback"


class Confidence(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ModelUnavailableError(Exception):
    """The forecast model could not be loaded or rejected its input."""


@dataclass(frozen=True)
class FeatureVector:
    """Model input. Field order is the column order the model was trained on."""

    consumption: float
    solar: float
    net_usage: float
    peak_hour: float  # 0-1, 0 when unknown
    occupants: float
    home_size: float  # 0-1 of HOME_SIZE_SCALE_SQFT, 0 when unknown
    solar_capacity: float
    battery_capacity: float
    electricity_rate: float
    growth_rate: float
    month: float  # 0-1
    is_weekend: float

    @classmethod
    def width(cls) -> int:
        return len(fields(cls))

    @classmethod
    def from_context(cls, ctx: FeatureContext) -> "FeatureVector":
        home_size = 0.0
        if isinstance(ctx.home_size_sqft, int | float):
            home_size = min(1.0, ctx.home_size_sqft / HOME_SIZE_SCALE_SQFT)

        month = 0.0
        weekend = 0.0
        if ctx.reference_time is not None:
            month = ctx.reference_time.month / 12
            weekend = 1.0 if ctx.reference_time.weekday() >= 5 else 0.0

        return cls(
            consumption=ctx.avg_daily_consumption,
            solar=ctx.avg_daily_solar,
            net_usage=ctx.net_usage,
            peak_hour=ctx.peak_hour / 23 if ctx.peak_hour is not None else 0.0,
            occupants=float(ctx.occupants),
            home_size=home_size,
            solar_capacity=ctx.solar_capacity_kw,
            battery_capacity=ctx.battery_capacity_kwh,
            electricity_rate=ctx.electricity_rate,
            growth_rate=ctx.growth_rate,
            month=month,
            is_weekend=weekend,
        )

    def as_array(self) -> np.ndarray:
        return np.asarray([astuple(self)], dtype=float)


class ForecastModel(Protocol):
    """Anything that predicts daily consumption (kWh) from a FeatureVector."""

    name: str

    def predict_daily(self, vector: FeatureVector) -> float: ...


class JoblibForecastModel:
    """Adapter around a joblib-serialised scikit-learn style regressor."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.name = f"joblib:{self.path.name}"
        self._estimator = None
        self._load_error: str | None = None

    def _load(self):
        if self._estimator is not None:
            return self._estimator
        if self._load_error is not None:
            raise ModelUnavailableError(self._load_error)
        try:
            estimator = joblib.load(self.path)
        except Exception as e:
            self._load_error = f"Failed to load forecast model {self.path}: {e}"
            raise ModelUnavailableError(self._load_error) from e

        expected = getattr(estimator, "n_features_in_", None)
        if expected is not None and expected != FeatureVector.width():
            self._load_error = (
                f"Forecast model {self.path} expects {expected} features, "
                f"FeatureVector has {FeatureVector.width()}"
            )
            raise ModelUnavailableError(self._load_error)

        logger.info(f"Loaded forecast model from {self.path}")
        self._estimator = estimator
        return estimator

    def predict_daily(self, vector: FeatureVector) -> float:
        estimator = self._load()
        prediction = np.ravel(estimator.predict(vector.as_array()))
        if prediction.size != 1:
            raise ModelUnavailableError(
                f"Forecast model returned {prediction.size} values, expected 1"
            )
        return float(prediction[0])


@dataclass(frozen=True)
class ForecastResult:
    daily_consumption: float
    next_month_consumption: float
    next_month_solar: float
    next_month_cost: float
    confidence: Confidence
    model: str

    def to_dict(self) -> dict:
        return {
            "next_month_consumption": round(self.next_month_consumption, 2),
            "next_month_solar": round(self.next_month_solar, 2),
            "next_month_cost": round(self.next_month_cost, 2),
            "confidence": self.confidence.value,
            "model": self.model,
        }


def fallback_forecast(ctx: FeatureContext) -> ForecastResult:
    """Trend formula: last month's daily average grown by the clamped growth rate."""
    consumption = ctx.avg_daily_consumption * DAYS_PER_MONTH * (1 + ctx.growth_rate)
    solar = ctx.avg_daily_solar * DAYS_PER_MONTH * (1 + ctx.growth_rate * SOLAR_GROWTH_WEIGHT)
    return ForecastResult(
        daily_consumption=consumption / DAYS_PER_MONTH,
        next_month_consumption=consumption,
        next_month_solar=solar,
        next_month_cost=consumption * ctx.electricity_rate,
        confidence=Confidence.MEDIUM,
        model=FALLBACK_MODEL_NAME,
    )


class ForecastEngine:
    """Stateless forecaster; safe to call repeatedly with modified contexts."""

    def __init__(self, model: ForecastModel | None = None):
        self.model = model

    def forecast(self, ctx: FeatureContext) -> ForecastResult:
        fallback = fallback_forecast(ctx)
        if self.model is None:
            return fallback

        try:
            daily = max(0.0, self.model.predict_daily(FeatureVector.from_context(ctx)))
        except ModelUnavailableError as e:
            logger.warning(f"Forecast model unavailable, using trend fallback: {e}")
            return fallback
        except Exception as e:
            logger.error(f"Forecast model inference failed, using trend fallback: {e}")
            return fallback

        consumption = daily * DAYS_PER_MONTH
        return ForecastResult(
            daily_consumption=daily,
            next_month_consumption=consumption,
            next_month_solar=fallback.next_month_solar,
            next_month_cost=consumption * ctx.electricity_rate,
            confidence=Confidence.HIGH,
            model=self.model.name,
        )

    def daily_consumption(self, ctx: FeatureContext) -> float:
        return self.forecast(ctx).daily_consumption


def load_forecast_engine(model_path: str | None) -> ForecastEngine:
    """Build an engine from configuration; no path means fallback only."""
    if not model_path:
        return ForecastEngine()
    return ForecastEngine(JoblibForecastModel(model_path))
