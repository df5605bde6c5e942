"""Schemas for insight generation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class GenerateInsightsRequest(BaseModel):
    """Request body for on-demand generation. The user id is validated by the service."""

    user_id: str | None = None


class InsightItem(BaseModel):
    title: str
    description: str
    category: str


class RecommendationItem(BaseModel):
    title: str
    description: str
    expected_savings_kwh: float
    expected_savings_currency: float
    priority: str
    category: str | None = None


class ForecastSummary(BaseModel):
    next_month_consumption: float
    next_month_solar: float
    next_month_cost: float
    confidence: str
    model: str


class InsightsResponse(BaseModel):
    """Response schema for a successful generation."""

    success: bool = True
    insights: list[InsightItem]
    recommendations: list[RecommendationItem]
    forecast: ForecastSummary
    analytics: dict


class StoredRecommendation(RecommendationItem):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class StoredForecast(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    target: str
    value: float
    period_start: datetime
    period_end: datetime
    model: str
    confidence: str
    created_at: datetime


class StoredAlert(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    message: str
    severity: str
    created_at: datetime
