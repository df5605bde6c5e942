"""Data retention cleanup service."""

import asyncio
import logging
from datetime import timedelta

from sqlalchemy import delete

from homewatt import database
from homewatt.config import get_settings
from homewatt.models import AlertRecord, EnergyLog, SolarLog

logger = logging.getLogger(__name__)


async def cleanup_old_data(session_maker=None) -> dict[str, int]:
    """Delete aggregated logs and alerts past their retention. Returns deleted row counts."""
    settings = get_settings()
    session_maker = session_maker or database.async_session_maker
    now = database.utc_now()
    deleted = {}

    async with session_maker() as db:
        cutoff = now - timedelta(days=settings.log_retention_days)
        result = await db.execute(delete(EnergyLog).where(EnergyLog.logged_at < cutoff))
        deleted["energy_logs"] = result.rowcount
        result = await db.execute(delete(SolarLog).where(SolarLog.logged_at < cutoff))
        deleted["solar_logs"] = result.rowcount
        logger.info(
            f"Deleted {deleted['energy_logs']} energy and {deleted['solar_logs']} solar logs "
            f"older than {settings.log_retention_days} days"
        )

        cutoff = now - timedelta(hours=settings.alert_retention_hours)
        result = await db.execute(delete(AlertRecord).where(AlertRecord.created_at < cutoff))
        deleted["alerts"] = result.rowcount
        logger.info(
            f"Deleted {result.rowcount} alerts older than {settings.alert_retention_hours} hours"
        )

        await db.commit()

    return deleted


class RetentionService:
    """Background service for data retention cleanup."""

    def __init__(self, interval_hours: int = 24):
        self._interval = interval_hours * 3600
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the retention cleanup service."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._cleanup_loop())
        logger.info("Started retention cleanup service")

    async def _cleanup_loop(self) -> None:
        """Periodic cleanup loop."""
        while self._running:
            try:
                await cleanup_old_data()
            except Exception as e:
                logger.error(f"Retention cleanup error: {e}")

            await asyncio.sleep(self._interval)

    async def stop(self) -> None:
        """Stop the retention cleanup service."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Stopped retention cleanup service")


# Global retention service instance
retention_service = RetentionService()
