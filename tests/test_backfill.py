"""Tests for historical data backfill."""

import random
from datetime import UTC, datetime

import pytest
from sqlalchemy import func, select

from homewatt.models import EnergyLog, PriceRecord, Profile, SolarLog, WeatherRecord
from homewatt.services.backfill import backfill_history
from homewatt.services.insights import InvalidInputError

NOW = datetime(2026, 6, 1, tzinfo=UTC)


class TestBackfill:
    async def test_two_days_of_hourly_history(self, session_maker):
        created = await backfill_history(
            "u1", days_back=2, session_maker=session_maker, now=NOW, rng=random.Random(1)
        )

        assert created == {
            "energy_logs": 48,
            "solar_logs": 22,
            "weather_samples": 48,
            "price_samples": 48,
        }
        async with session_maker() as db:
            for model, expected in (
                (EnergyLog, 48),
                (SolarLog, 22),
                (WeatherRecord, 48),
                (PriceRecord, 48),
            ):
                assert await db.scalar(select(func.count()).select_from(model)) == expected

    async def test_uses_profile_rate(self, session_maker):
        async with session_maker() as db:
            db.add(Profile(user_id="u1", electricity_rate=0.20))
            await db.commit()

        await backfill_history(
            "u1", days_back=1, session_maker=session_maker, now=NOW, rng=random.Random(2)
        )
        async with session_maker() as db:
            prices = set((await db.execute(select(PriceRecord.price_per_kwh))).scalars().all())
        assert prices == {0.30, 0.14, 0.20}

    @pytest.mark.parametrize("days_back", [0, -1, 366])
    async def test_rejects_out_of_range_days(self, session_maker, days_back):
        with pytest.raises(InvalidInputError):
            await backfill_history("u1", days_back=days_back, session_maker=session_maker)

    async def test_rejects_missing_user(self, session_maker):
        with pytest.raises(InvalidInputError):
            await backfill_history("", session_maker=session_maker)
