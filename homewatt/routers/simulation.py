"""Simulation control API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from homewatt.database import get_db
from homewatt.models import DataSource, Profile
from homewatt.schemas.simulation import BackfillResponse, SimulationStatus
from homewatt.services.backfill import backfill_history
from homewatt.services.insights import InvalidInputError
from homewatt.services.simulation import SimulationMode, simulation_manager

router = APIRouter(prefix="/api/simulation", tags=["simulation"])


@router.get("/{user_id}", response_model=SimulationStatus)
async def get_simulation(user_id: str) -> SimulationStatus:
    """Get the simulation state of a household."""
    handle = simulation_manager.get(user_id)
    if handle is None:
        return SimulationStatus(user_id=user_id, running=False)
    return SimulationStatus(**handle.status())


@router.post("/{user_id}/start", response_model=SimulationStatus)
async def start_simulation(
    user_id: str,
    mode: SimulationMode = Query(default=SimulationMode.BACKGROUND),
    db: AsyncSession = Depends(get_db),
) -> SimulationStatus:
    """Start a simulation. Background mode requires a simulation-sourced profile."""
    if mode == SimulationMode.BACKGROUND:
        profile = await db.get(Profile, user_id)
        if not profile or profile.data_source != DataSource.SIMULATION:
            raise HTTPException(
                status_code=409,
                detail="Profile data source must be 'simulation' for background mode",
            )
    handle = await simulation_manager.start_user(user_id, mode)
    return SimulationStatus(**handle.status())


@router.post("/{user_id}/stop", response_model=SimulationStatus)
async def stop_simulation(user_id: str) -> SimulationStatus:
    """Stop a running simulation."""
    await simulation_manager.stop_user(user_id)
    return SimulationStatus(user_id=user_id, running=False)


@router.post("/{user_id}/backfill", response_model=BackfillResponse)
async def backfill(
    user_id: str,
    days_back: int = Query(default=90),
) -> BackfillResponse:
    """Seed a household with synthetic hourly history."""
    try:
        created = await backfill_history(user_id, days_back)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return BackfillResponse(
        success=True,
        message=f"Successfully backfilled {days_back} days of historical data",
        records_created=created,
    )
