"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from homewatt.database import get_db
from homewatt.models import EnergySample, PriceRecord
from homewatt.services.simulation import simulation_manager
from homewatt.services.write_queue import write_queue

router = APIRouter(tags=["metrics"])


async def collect_metrics(db: AsyncSession) -> bytes:
    """Collect all metrics and return Prometheus format."""
    registry = CollectorRegistry()

    simulations_running = Gauge(
        "homewatt_simulations_running",
        "Number of running simulation clocks",
        registry=registry,
    )
    queue_pending = Gauge(
        "homewatt_write_queue_pending",
        "Write batches waiting to be stored",
        registry=registry,
    )
    queue_dropped = Gauge(
        "homewatt_write_queue_dropped",
        "Write batches dropped after retries or on a full queue",
        registry=registry,
    )
    consumption = Gauge(
        "homewatt_consumption_kw",
        "Latest simulated household consumption (kW)",
        ["user_id"],
        registry=registry,
    )
    solar = Gauge(
        "homewatt_solar_kw",
        "Latest simulated solar production (kW)",
        ["user_id"],
        registry=registry,
    )
    grid = Gauge(
        "homewatt_grid_kw",
        "Latest simulated grid draw (kW)",
        ["user_id"],
        registry=registry,
    )
    price = Gauge(
        "homewatt_grid_price_per_kwh",
        "Latest grid price per kWh",
        ["user_id", "tier"],
        registry=registry,
    )

    simulations_running.set(simulation_manager.running_count)
    queue_pending.set(write_queue.pending)
    queue_dropped.set(write_queue.dropped)

    latest_sample = (
        select(EnergySample.user_id, func.max(EnergySample.timestamp).label("ts"))
        .group_by(EnergySample.user_id)
        .subquery()
    )
    result = await db.execute(
        select(EnergySample).join(
            latest_sample,
            (EnergySample.user_id == latest_sample.c.user_id)
            & (EnergySample.timestamp == latest_sample.c.ts),
        )
    )
    for sample in result.scalars().all():
        consumption.labels(user_id=sample.user_id).set(sample.consumption_kw)
        solar.labels(user_id=sample.user_id).set(sample.solar_kw)
        grid.labels(user_id=sample.user_id).set(sample.grid_kw)

    latest_price = (
        select(PriceRecord.user_id, func.max(PriceRecord.timestamp).label("ts"))
        .group_by(PriceRecord.user_id)
        .subquery()
    )
    result = await db.execute(
        select(PriceRecord).join(
            latest_price,
            (PriceRecord.user_id == latest_price.c.user_id)
            & (PriceRecord.timestamp == latest_price.c.ts),
        )
    )
    for record in result.scalars().all():
        price.labels(user_id=record.user_id, tier=record.tier).set(record.price_per_kwh)

    return generate_latest(registry)


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics(db: AsyncSession = Depends(get_db)) -> PlainTextResponse:
    """Prometheus metrics endpoint."""
    return PlainTextResponse(content=await collect_metrics(db), media_type=CONTENT_TYPE_LATEST)
