"""API routers."""

from homewatt.routers.health import router as health_router
from homewatt.routers.households import router as households_router
from homewatt.routers.insights import router as insights_router
from homewatt.routers.metrics import router as metrics_router
from homewatt.routers.simulation import router as simulation_router

__all__ = [
    "health_router",
    "households_router",
    "insights_router",
    "metrics_router",
    "simulation_router",
]
