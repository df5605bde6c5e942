"""Insight generation API endpoints."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from homewatt.database import get_db
from homewatt.models import AlertRecord, ForecastRecord, RecommendationRecord
from homewatt.schemas.insights import (
    GenerateInsightsRequest,
    InsightsResponse,
    StoredAlert,
    StoredForecast,
    StoredRecommendation,
)
from homewatt.services.insights import InvalidInputError, generate_insights

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.post("/generate", response_model=InsightsResponse)
async def generate(request: GenerateInsightsRequest):
    """Generate insights, recommendations and a forecast for a household."""
    try:
        report = await generate_insights(request.user_id)
    except InvalidInputError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
    except Exception as e:
        logger.error(f"Insight generation failed for {request.user_id}: {e}")
        return JSONResponse(
            status_code=500, content={"success": False, "error": "Failed to generate insights"}
        )
    return report.to_dict()


@router.get("/{user_id}/recommendations", response_model=list[StoredRecommendation])
async def list_recommendations(
    user_id: str, db: AsyncSession = Depends(get_db)
) -> list[RecommendationRecord]:
    """Stored recommendations, newest first."""
    result = await db.execute(
        select(RecommendationRecord)
        .where(RecommendationRecord.user_id == user_id)
        .order_by(RecommendationRecord.created_at.desc())
    )
    return list(result.scalars().all())


@router.get("/{user_id}/forecasts", response_model=list[StoredForecast])
async def list_forecasts(user_id: str, db: AsyncSession = Depends(get_db)) -> list[ForecastRecord]:
    """Stored forecasts, one per target."""
    result = await db.execute(
        select(ForecastRecord)
        .where(ForecastRecord.user_id == user_id)
        .order_by(ForecastRecord.target)
    )
    return list(result.scalars().all())


@router.get("/{user_id}/alerts", response_model=list[StoredAlert])
async def list_alerts(user_id: str, db: AsyncSession = Depends(get_db)) -> list[AlertRecord]:
    """Alerts raised by the live simulation, newest first."""
    result = await db.execute(
        select(AlertRecord)
        .where(AlertRecord.user_id == user_id)
        .order_by(AlertRecord.created_at.desc())
        .limit(50)
    )
    return list(result.scalars().all())
