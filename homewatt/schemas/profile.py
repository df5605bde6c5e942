"""Schemas for household profiles and appliances."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from homewatt.engine.load import DeviceStatus
from homewatt.models.profile import DataSource


class ProfileUpdate(BaseModel):
    """Schema for creating or updating a profile. Omitted fields are left as they are."""

    electricity_rate: float | None = Field(default=None, gt=0, le=10)
    solar_panel_capacity: float | None = Field(default=None, ge=0, le=1000)
    battery_capacity: float | None = Field(default=None, ge=0, le=1000)
    occupants: int | None = Field(default=None, ge=1, le=50)
    home_size_sqft: float | None = Field(default=None, gt=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    timezone: str | None = Field(default=None, max_length=64)
    data_source: DataSource | None = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class ProfileResponse(BaseModel):
    """Response schema for a profile."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    electricity_rate: float | None
    solar_panel_capacity: float | None
    battery_capacity: float | None
    occupants: int | None
    home_size_sqft: float | None
    currency: str | None
    timezone: str | None
    data_source: DataSource
    updated_at: datetime | None = None


class ApplianceCreate(BaseModel):
    """Schema for adding an appliance."""

    name: str = Field(..., min_length=1, max_length=255)
    power_rating_w: float = Field(..., ge=0, le=100_000)
    status: DeviceStatus = DeviceStatus.OFF


class ApplianceResponse(BaseModel):
    """Response schema for an appliance."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    power_rating_w: float
    status: DeviceStatus
