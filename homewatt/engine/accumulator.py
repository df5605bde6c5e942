"""Running energy totals flushed periodically into the aggregated logs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FlushPolicy:
    """When the accumulator is due: after a simulated window or a tick count."""

    window_seconds: float | None = None
    ticks: int | None = None

    def __post_init__(self):
        if (self.window_seconds is None) == (self.ticks is None):
            raise ValueError("FlushPolicy needs exactly one of window_seconds or ticks")


@dataclass(frozen=True)
class FlushTotals:
    consumption_kwh: float
    solar_kwh: float

    @property
    def is_empty(self) -> bool:
        return self.consumption_kwh <= 0 and self.solar_kwh <= 0


class EnergyAccumulator:
    """Integrates instantaneous kW readings into kWh between flushes."""

    def __init__(self, policy: FlushPolicy):
        self.policy = policy
        self.consumption_kwh = 0.0
        self.solar_kwh = 0.0
        self.elapsed_seconds = 0.0
        self.ticks = 0

    def add(self, consumption_kw: float, solar_kw: float, delta_seconds: float) -> None:
        """Weight one tick's readings by its simulated duration."""
        hours = delta_seconds / 3600
        self.consumption_kwh += max(0.0, consumption_kw) * hours
        self.solar_kwh += max(0.0, solar_kw) * hours
        self.elapsed_seconds += delta_seconds
        self.ticks += 1

    @property
    def due(self) -> bool:
        if self.policy.window_seconds is not None:
            return self.elapsed_seconds >= self.policy.window_seconds
        return self.ticks >= self.policy.ticks

    def drain(self) -> FlushTotals:
        """Return the accumulated totals and reset to zero."""
        totals = FlushTotals(self.consumption_kwh, self.solar_kwh)
        self.consumption_kwh = 0.0
        self.solar_kwh = 0.0
        self.elapsed_seconds = 0.0
        self.ticks = 0
        return totals
