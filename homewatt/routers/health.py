"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from homewatt import __version__
from homewatt.database import get_db
from homewatt.services.simulation import simulation_manager
from homewatt.services.write_queue import write_queue

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(db: AsyncSession = Depends(get_db)) -> dict:
    """Liveness with database reachability and background service state."""
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        database = f"error: {e}"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "version": __version__,
        "database": database,
        "simulations_running": simulation_manager.running_count,
        "write_queue_pending": write_queue.pending,
    }
