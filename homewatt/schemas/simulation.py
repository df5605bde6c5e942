"""Schemas for simulation control."""

from pydantic import BaseModel


class SimulationStatus(BaseModel):
    user_id: str
    running: bool
    mode: str | None = None
    sim_time: str | None = None
    ticks: int = 0
    latest: dict | None = None


class BackfillResponse(BaseModel):
    success: bool
    message: str
    records_created: dict[str, int]
