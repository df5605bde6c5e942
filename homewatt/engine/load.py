"""Household load model."""

import enum
from collections.abc import Iterable
from dataclasses import dataclass

HIGH_POWER_THRESHOLD_W = 1000


class DeviceStatus(str, enum.Enum):
    """On/off state of an appliance."""

    ON = "on"
    OFF = "off"


@dataclass(frozen=True)
class DeviceState:
    """Appliance as seen by the load model."""

    id: str
    name: str
    power_rating_w: float
    status: DeviceStatus = DeviceStatus.OFF

    @property
    def is_on(self) -> bool:
        return self.status == DeviceStatus.ON


def consumption_kw(devices: Iterable[DeviceState]) -> float:
    """Instantaneous consumption: rated watts of every running device, in kW."""
    return sum(d.power_rating_w for d in devices if d.is_on) / 1000


def active_count(devices: Iterable[DeviceState]) -> int:
    return sum(1 for d in devices if d.is_on)


def high_power_devices(
    devices: Iterable[DeviceState], threshold_w: float = HIGH_POWER_THRESHOLD_W
) -> list[DeviceState]:
    """Devices rated at or above ``threshold_w``, largest first."""
    heavy = [d for d in devices if d.power_rating_w >= threshold_w]
    return sorted(heavy, key=lambda d: d.power_rating_w, reverse=True)
