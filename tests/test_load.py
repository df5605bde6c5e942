"""Tests for the household load model."""

import pytest

from homewatt.engine.load import (
    DeviceState,
    DeviceStatus,
    active_count,
    consumption_kw,
    high_power_devices,
)


def device(name, watts, on=True):
    return DeviceState(
        id=name, name=name, power_rating_w=watts, status=DeviceStatus.ON if on else DeviceStatus.OFF
    )


class TestConsumption:
    def test_sums_running_devices_only(self):
        devices = [device("oven", 2000), device("tv", 150), device("dryer", 3000, on=False)]
        assert consumption_kw(devices) == pytest.approx(2.15)
        assert active_count(devices) == 2

    def test_no_devices(self):
        assert consumption_kw([]) == 0.0
        assert active_count([]) == 0


class TestHighPowerDevices:
    def test_threshold_is_inclusive_and_sorted(self):
        devices = [device("kettle", 1000), device("tv", 150), device("heater", 2500, on=False)]
        heavy = high_power_devices(devices)
        assert [d.name for d in heavy] == ["heater", "kettle"]

    def test_custom_threshold(self):
        assert high_power_devices([device("tv", 150)], threshold_w=100)[0].name == "tv"
