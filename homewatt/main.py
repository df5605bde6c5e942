"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from homewatt import __version__
from homewatt.config import get_settings
from homewatt.database import close_db, init_db
from homewatt.routers import (
    health_router,
    households_router,
    insights_router,
    metrics_router,
    simulation_router,
)
from homewatt.services.retention import retention_service
from homewatt.services.scheduler import scheduler_service
from homewatt.services.simulation import simulation_manager
from homewatt.services.write_queue import write_queue

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting HomeWatt...")

    await init_db()
    logger.info("Database initialized")

    # The writer must be running before any simulation ticks
    await write_queue.start()

    await simulation_manager.start()
    logger.info(f"Simulation manager started ({simulation_manager.running_count} running)")

    await retention_service.start()
    logger.info("Retention service started")

    await scheduler_service.start()
    logger.info("Insight scheduler started")

    yield

    # Shutdown
    logger.info("Shutting down HomeWatt...")

    await scheduler_service.stop()
    await retention_service.stop()
    await simulation_manager.stop()
    await write_queue.stop()
    await close_db()

    logger.info("Shutdown complete")


app = FastAPI(
    title="HomeWatt",
    description="Household energy simulation, forecasting and savings recommendations",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(households_router)
app.include_router(simulation_router)
app.include_router(insights_router)


@app.get("/")
async def root():
    """Root endpoint - shows API info."""
    return {
        "name": "HomeWatt",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
    }
