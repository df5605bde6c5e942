"""Scheduler service for automatic insight regeneration."""

import asyncio
import logging
from datetime import timedelta

from sqlalchemy import func, select

from homewatt import database
from homewatt.config import get_settings
from homewatt.database import as_utc
from homewatt.models import DataSource, EnergySample, Profile
from homewatt.services.insights import (
    generate_insights,
    last_data_watermark,
    last_generated_at,
)

logger = logging.getLogger(__name__)


class SchedulerService:
    """Background service that refreshes stale insights when new data has landed."""

    def __init__(self, session_maker=None):
        self._running = False
        self._task: asyncio.Task | None = None
        self._session_maker = session_maker

    @property
    def session_maker(self):
        return self._session_maker or database.async_session_maker

    async def start(self) -> None:
        """Start the scheduler service."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._schedule_loop())
        logger.info("Started insight refresh scheduler")

    async def stop(self) -> None:
        """Stop the scheduler service."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Stopped insight refresh scheduler")

    async def _schedule_loop(self) -> None:
        """Main loop - check periodically which households need fresh insights."""
        interval = get_settings().insights_refresh_interval_seconds
        while self._running:
            try:
                refreshed = await self.refresh_due()
                if refreshed:
                    logger.info(f"Refreshed insights for {len(refreshed)} households")
            except Exception as e:
                logger.error(f"Scheduler loop error: {e}")

            await asyncio.sleep(interval)

    async def is_due(self, user_id: str) -> bool:
        """New raw data since the last generation, and that generation is old enough."""
        max_age = timedelta(minutes=get_settings().insights_max_age_minutes)
        async with self.session_maker() as db:
            generated = await last_generated_at(db, user_id)
            watermark = await last_data_watermark(db, user_id)
            result = await db.execute(
                select(func.max(EnergySample.timestamp)).where(EnergySample.user_id == user_id)
            )
            newest_sample = result.scalar()

        if newest_sample is None:
            return False
        if generated is None:
            return True
        # Sample timestamps are simulated time; compare them to the data the
        # last generation saw, not to when it ran
        if watermark is not None and as_utc(newest_sample) <= watermark:
            return False
        return database.utc_now() - generated >= max_age

    async def refresh_due(self) -> list[str]:
        """Regenerate insights for every simulation household that is due."""
        async with self.session_maker() as db:
            result = await db.execute(
                select(Profile.user_id).where(Profile.data_source == DataSource.SIMULATION)
            )
            user_ids = result.scalars().all()

        refreshed = []
        for user_id in user_ids:
            try:
                if await self.is_due(user_id):
                    await generate_insights(user_id, session_maker=self.session_maker)
                    refreshed.append(user_id)
            except Exception as e:
                logger.error(f"Failed to refresh insights for {user_id}: {e}")
        return refreshed


# Global scheduler service instance
scheduler_service = SchedulerService()
