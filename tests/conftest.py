"""Shared fixtures: an in-memory SQLite database with the full schema."""

from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from homewatt import models  # noqa: F401
from homewatt.database import Base
from homewatt.engine.features import FeatureContext


@pytest.fixture
async def session_maker():
    """Session factory bound to a fresh in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


def _context(**overrides) -> FeatureContext:
    values = {
        "avg_daily_consumption": 30.0,
        "avg_daily_solar": 0.0,
        "net_usage": 900.0,
        "peak_hour": 12,
        "occupants": 3,
        "home_size_sqft": 1800.0,
        "solar_capacity_kw": 0.0,
        "battery_capacity_kwh": 0.0,
        "electricity_rate": 0.12,
        "growth_rate": 0.0,
        "reference_time": datetime(2026, 6, 10, 12, 0, tzinfo=UTC),
    }
    values.update(overrides)
    return FeatureContext(**values)


@pytest.fixture
def make_context():
    """Build a FeatureContext for a grid-only household using 30 kWh/day."""
    return _context
