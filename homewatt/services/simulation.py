"""Per-household simulation clock and the manager that owns all running clocks."""

import asyncio
import enum
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from sqlalchemy import delete, select

from homewatt import database
from homewatt.config import Settings, get_settings
from homewatt.engine.accumulator import EnergyAccumulator, FlushPolicy, FlushTotals
from homewatt.engine.alerts import Alert, AlertTracker, Reading
from homewatt.engine.features import ProfileSettings
from homewatt.engine.load import DeviceState, active_count, consumption_kw
from homewatt.engine.pricing import PriceSample, demo_price, standard_price
from homewatt.engine.weather import (
    WeatherModel,
    WeatherSample,
    demo_solar_power_kw,
    fractional_hour,
    solar_power_kw,
)
from homewatt.models import (
    AlertRecord,
    DataSource,
    EnergyLog,
    EnergySample,
    PriceRecord,
    Profile,
    SolarLog,
    WeatherRecord,
)
from homewatt.services.household import (
    UTC_ZONE,
    latest_data_time,
    load_devices,
    load_profile,
    profile_settings,
    profile_timezone,
)
from homewatt.services.notifications import notification_service
from homewatt.services.write_queue import WriteBatch, WriteQueue, write_queue

logger = logging.getLogger(__name__)


class SimulationMode(str, enum.Enum):
    """Background mode feeds the dashboard; interactive mode drives the demo."""

    BACKGROUND = "background"
    INTERACTIVE = "interactive"


@dataclass(frozen=True)
class ModeConfig:
    tick_seconds: float
    sim_delta: timedelta
    flush_policy: FlushPolicy


def mode_config(mode: SimulationMode, settings: Settings | None = None) -> ModeConfig:
    settings = settings or get_settings()
    if mode == SimulationMode.BACKGROUND:
        return ModeConfig(
            tick_seconds=settings.background_tick_seconds,
            sim_delta=timedelta(seconds=settings.background_sim_delta_seconds),
            flush_policy=FlushPolicy(window_seconds=settings.background_flush_window_seconds),
        )
    return ModeConfig(
        tick_seconds=settings.interactive_tick_seconds,
        sim_delta=timedelta(seconds=settings.interactive_sim_delta_seconds),
        flush_policy=FlushPolicy(ticks=settings.interactive_flush_ticks),
    )


@dataclass(frozen=True)
class TickResult:
    """What one tick computed."""

    sim_time: datetime
    consumption_kw: float
    solar_kw: float
    grid_kw: float
    weather: WeatherSample
    price: PriceSample
    active_devices: int
    total_devices: int
    flushed: FlushTotals | None
    alerts: tuple[Alert, ...]

    def to_dict(self) -> dict:
        return {
            "sim_time": self.sim_time.isoformat(),
            "consumption_kw": round(self.consumption_kw, 3),
            "solar_kw": round(self.solar_kw, 3),
            "grid_kw": round(self.grid_kw, 3),
            "price_per_kwh": round(self.price.price_per_kwh, 4),
            "price_tier": self.price.tier.value,
            "temperature_c": self.weather.temperature_c,
            "cloud_cover": self.weather.cloud_cover,
            "irradiance_wm2": self.weather.irradiance_wm2,
            "condition": self.weather.condition.value,
            "active_devices": self.active_devices,
            "total_devices": self.total_devices,
        }


class SimulationHandle:
    """Simulation clock for one household.

    Owns exactly one timer task. Every tick advances simulated time by a
    fixed delta, computes load, weather, solar and price, and hands the
    resulting rows to the write queue; it never waits for storage.
    """

    def __init__(
        self,
        user_id: str,
        mode: SimulationMode = SimulationMode.BACKGROUND,
        writer: WriteQueue | None = None,
        settings: Settings | None = None,
        session_maker=None,
        rng: random.Random | None = None,
        start_time: datetime | None = None,
    ):
        self.user_id = user_id
        self.mode = mode
        self.settings = settings or get_settings()
        self.config = mode_config(mode, self.settings)
        self.writer = writer or write_queue
        self._session_maker = session_maker
        self._rng = rng or random.Random()

        self.sim_time = start_time or database.utc_now()
        self.window_start = self.sim_time
        self.accumulator = EnergyAccumulator(self.config.flush_policy)
        self.weather_model = WeatherModel(self._rng)
        self.alerts = AlertTracker()
        self.ticks = 0
        self.last_result: TickResult | None = None

        self._profile = profile_settings(None)
        self._tz: tzinfo = UTC_ZONE
        self._devices: list[DeviceState] = []
        self._task: asyncio.Task | None = None
        self._notifications: set[asyncio.Task] = set()

    @property
    def session_maker(self):
        return self._session_maker or database.async_session_maker

    @property
    def is_running(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        """Start ticking. A second call while running is a no-op."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._tick_loop())
        logger.info(f"Started {self.mode.value} simulation for {self.user_id}")

    async def stop(self) -> None:
        """Stop ticking and wait for alert notifications already in flight.

        Writes already queued are left to the write queue.
        """
        task, self._task = self._task, None
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.info(f"Stopped simulation for {self.user_id}")
        await self.wait_for_notifications()

    async def resume_clock(self) -> None:
        """Continue from the newest stored data when an earlier session ran ahead of wall time."""
        try:
            async with self.session_maker() as db:
                newest = await latest_data_time(db, self.user_id)
        except Exception as e:
            logger.error(f"Failed to read last simulated time for {self.user_id}: {e}")
            return
        if newest is not None and newest > self.sim_time:
            logger.info(f"Resuming simulation for {self.user_id} at {newest.isoformat()}")
            self.sim_time = newest
            self.window_start = newest

    async def _tick_loop(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Simulation tick failed for {self.user_id}: {e}")
            await asyncio.sleep(self.config.tick_seconds)

    async def refresh_inputs(self) -> None:
        """Re-read profile and appliances; keep the previous values if the read fails."""
        try:
            async with self.session_maker() as db:
                profile = await load_profile(db, self.user_id)
                devices = await load_devices(db, self.user_id)
        except Exception as e:
            logger.error(f"Failed to load simulation inputs for {self.user_id}: {e}")
            return
        self._profile = profile_settings(profile)
        self._tz = profile_timezone(profile)
        self._devices = devices

    @property
    def profile(self) -> ProfileSettings:
        return self._profile

    def _solar_and_price(self, local: datetime, weather: WeatherSample) -> tuple[float, PriceSample]:
        if self.mode == SimulationMode.BACKGROUND:
            solar = solar_power_kw(weather.irradiance_wm2, self._profile.solar_capacity_kw)
            price, tier = standard_price(local.hour, self._profile.electricity_rate)
        else:
            solar = demo_solar_power_kw(fractional_hour(local), weather.cloud_cover)
            price, tier = demo_price(local.hour)
        return solar, PriceSample(timestamp=self.sim_time, price_per_kwh=price, tier=tier)

    async def tick(self) -> TickResult:
        """Advance the clock one step and queue its writes."""
        await self.refresh_inputs()

        self.sim_time += self.config.sim_delta
        self.ticks += 1
        local = self.sim_time.astimezone(self._tz)

        weather = self.weather_model.sample(local)
        solar, price = self._solar_and_price(local, weather)
        consumption = consumption_kw(self._devices)
        grid = max(0.0, consumption - solar)
        active = active_count(self._devices)

        samples = WriteBatch(label="samples")
        samples.add(
            EnergySample,
            user_id=self.user_id,
            timestamp=self.sim_time,
            consumption_kw=consumption,
            solar_kw=solar,
            grid_kw=grid,
            battery_level=0.0,
            active_devices=active,
            total_devices=len(self._devices),
        )
        samples.add(
            WeatherRecord,
            user_id=self.user_id,
            timestamp=self.sim_time,
            temperature_c=weather.temperature_c,
            cloud_cover=weather.cloud_cover,
            irradiance_wm2=weather.irradiance_wm2,
            humidity=weather.humidity,
            wind_speed_kmh=weather.wind_speed_kmh,
            condition=weather.condition.value,
        )
        samples.add(
            PriceRecord,
            user_id=self.user_id,
            timestamp=self.sim_time,
            price_per_kwh=price.price_per_kwh,
            tier=price.tier.value,
        )
        self.writer.enqueue(samples)

        self.accumulator.add(consumption, solar, self.config.sim_delta.total_seconds())
        flushed = None
        if self.accumulator.due:
            flushed = self.flush(irradiance_wm2=weather.irradiance_wm2)

        self.writer.enqueue(self.retention_batch())

        reading = Reading(consumption_kw=consumption, solar_kw=solar, grid_kw=grid, tier=price.tier)
        alerts = tuple(self.alerts.check(reading, self.sim_time))
        if alerts:
            self._raise_alerts(alerts)

        self.last_result = TickResult(
            sim_time=self.sim_time,
            consumption_kw=consumption,
            solar_kw=solar,
            grid_kw=grid,
            weather=weather,
            price=price,
            active_devices=active,
            total_devices=len(self._devices),
            flushed=flushed,
            alerts=alerts,
        )
        return self.last_result

    def flush(self, irradiance_wm2: float | None = None) -> FlushTotals:
        """Drain the accumulator into log rows. Zero totals produce no rows."""
        totals = self.accumulator.drain()
        batch = WriteBatch(label="flush")
        if totals.consumption_kwh > 0:
            batch.add(
                EnergyLog,
                user_id=self.user_id,
                logged_at=self.sim_time,
                consumption_kwh=totals.consumption_kwh,
            )
        if totals.solar_kwh > 0:
            batch.add(
                SolarLog,
                user_id=self.user_id,
                logged_at=self.sim_time,
                generation_kwh=totals.solar_kwh,
                irradiance_wm2=irradiance_wm2,
            )
        self.writer.enqueue(batch)
        self.window_start = self.sim_time
        return totals

    def retention_batch(self) -> WriteBatch:
        """Deletes for raw samples older than the retention window (simulated time)."""
        cutoff = self.sim_time - timedelta(hours=self.settings.raw_retention_hours)
        batch = WriteBatch(label="retention")
        for model in (EnergySample, WeatherRecord, PriceRecord):
            batch.statements.append(
                delete(model).where(model.user_id == self.user_id, model.timestamp < cutoff)
            )
        return batch

    def _raise_alerts(self, alerts: tuple[Alert, ...]) -> None:
        batch = WriteBatch(label="alerts")
        for alert in alerts:
            batch.add(
                AlertRecord,
                user_id=self.user_id,
                title=alert.title,
                message=alert.message,
                severity=alert.severity.value,
            )
        self.writer.enqueue(batch)

        if self.settings.notifications_enabled:
            task = asyncio.create_task(self._send_notifications(alerts))
            self._notifications.add(task)
            task.add_done_callback(self._notifications.discard)

    async def _send_notifications(self, alerts: tuple[Alert, ...]) -> None:
        for alert in alerts:
            await notification_service.send_alert(
                self.settings.alert_notification_urls, self.user_id, alert
            )

    @property
    def pending_notifications(self) -> int:
        return len(self._notifications)

    async def wait_for_notifications(self) -> None:
        if self._notifications:
            await asyncio.gather(*list(self._notifications), return_exceptions=True)

    def status(self) -> dict:
        return {
            "user_id": self.user_id,
            "running": self.is_running,
            "mode": self.mode.value,
            "sim_time": self.sim_time.isoformat(),
            "ticks": self.ticks,
            "latest": self.last_result.to_dict() if self.last_result else None,
        }


class SimulationManager:
    """Owns one SimulationHandle per active household."""

    def __init__(self, writer: WriteQueue | None = None, session_maker=None):
        self._handles: dict[str, SimulationHandle] = {}
        self._writer = writer
        self._session_maker = session_maker
        self._running = False

    @property
    def session_maker(self):
        return self._session_maker or database.async_session_maker

    async def start(self) -> None:
        """Start background simulations for every simulation-sourced profile."""
        if self._running:
            return
        self._running = True
        if not get_settings().simulation_autostart:
            logger.info("Simulation autostart disabled")
            return

        async with self.session_maker() as db:
            result = await db.execute(
                select(Profile.user_id).where(Profile.data_source == DataSource.SIMULATION)
            )
            user_ids = result.scalars().all()

        for user_id in user_ids:
            await self.start_user(user_id)
        logger.info(f"Started {len(user_ids)} background simulations")

    async def start_user(
        self, user_id: str, mode: SimulationMode = SimulationMode.BACKGROUND
    ) -> SimulationHandle:
        """Start (or return the already running) simulation for a household."""
        handle = self._handles.get(user_id)
        if handle is not None and handle.mode == mode:
            handle.start()
            return handle
        start_time = None
        if handle is not None:
            await handle.stop()
            start_time = max(database.utc_now(), handle.sim_time)

        handle = SimulationHandle(
            user_id,
            mode=mode,
            writer=self._writer,
            session_maker=self._session_maker,
            start_time=start_time,
        )
        self._handles[user_id] = handle
        await handle.resume_clock()
        handle.start()
        return handle

    async def stop_user(self, user_id: str) -> bool:
        handle = self._handles.pop(user_id, None)
        if handle is None:
            return False
        await handle.stop()
        return True

    async def stop(self) -> None:
        """Stop all simulations."""
        self._running = False
        await asyncio.gather(
            *[handle.stop() for handle in self._handles.values()],
            return_exceptions=True,
        )
        self._handles.clear()
        logger.info("Stopped all simulations")

    def get(self, user_id: str) -> SimulationHandle | None:
        return self._handles.get(user_id)

    @property
    def running_count(self) -> int:
        return sum(1 for handle in self._handles.values() if handle.is_running)

    def statuses(self) -> dict[str, dict]:
        return {user_id: handle.status() for user_id, handle in self._handles.items()}


# Global simulation manager instance
simulation_manager = SimulationManager()
