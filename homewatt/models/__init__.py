"""SQLAlchemy ORM models."""

from homewatt.models.appliance import Appliance
from homewatt.models.insights import AlertRecord, ForecastRecord, RecommendationRecord
from homewatt.models.logs import EnergyLog, SolarLog
from homewatt.models.profile import DataSource, Profile
from homewatt.models.samples import EnergySample, PriceRecord, WeatherRecord

__all__ = [
    "AlertRecord",
    "Appliance",
    "DataSource",
    "EnergyLog",
    "EnergySample",
    "ForecastRecord",
    "PriceRecord",
    "Profile",
    "RecommendationRecord",
    "SolarLog",
    "WeatherRecord",
]
