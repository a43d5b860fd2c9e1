"""Windows batteries.

Two raw sources are supported:

* :class:`SystemPowerStatus` mirrors ``SYSTEM_POWER_STATUS`` as returned by
  ``GetSystemPowerStatus``. It only describes the system battery as a
  whole.
* :class:`DeviceIoBatteryState` combines the ``BATTERY_INFORMATION`` and
  ``BATTERY_STATUS`` records returned by ``IOCTL_BATTERY_QUERY_*`` for one
  battery device.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_pascal

from pycello._constants import (
    AC_LINE_OFFLINE,
    AC_LINE_ONLINE,
    BATTERY_CAPACITY_RELATIVE,
    BATTERY_CHARGING,
    BATTERY_CRITICAL,
    BATTERY_DISCHARGING,
    BATTERY_FLAG_CHARGING,
    BATTERY_FLAG_CRITICAL,
    BATTERY_FLAG_NO_SYSTEM_BATTERY,
    BATTERY_FLAG_UNKNOWN,
    BATTERY_LIFE_UNKNOWN,
    BATTERY_PERCENT_UNKNOWN,
    BATTERY_POWER_ON_LINE,
    BATTERY_SYSTEM_BATTERY,
    BATTERY_UNKNOWN_CAPACITY,
    BATTERY_UNKNOWN_RATE,
    BATTERY_UNKNOWN_TIME,
    BATTERY_UNKNOWN_VOLTAGE,
    KELVIN_OFFSET,
)
from pycello.ingestion.normalize import Int32, UInt32, clamp_percentage, percentage, unless_sentinel
from pycello.models._base import RawBatteryState
from pycello.models.battery import BatteryInfo, ChargingFlags, resolve_direction
from pycello.models.capacity import CapacityValue
from pycello.snapshot import MultiBatterySnapshot, SystemBatterySnapshot

_logger = logging.getLogger(__name__)


def _hex(value: Any) -> str:
    return "null" if value is None else f"0x{value:08X}"


# ---------------------------------------------------------------------------
# GetSystemPowerStatus
# ---------------------------------------------------------------------------


class SystemPowerStatus(RawBatteryState):
    """Raw ``SYSTEM_POWER_STATUS`` fields."""

    model_config = ConfigDict(alias_generator=to_pascal)

    ac_line_status: UInt32 = Field(default=None, alias="ACLineStatus")
    """0 offline, 1 online, 255 unknown."""
    battery_flag: UInt32 = None
    battery_life_percent: UInt32 = None
    """Charge in percent, 255 when unknown."""
    system_status_flag: UInt32 = None
    battery_life_time: UInt32 = None
    """Seconds of battery life left, ``0xFFFFFFFF`` when unknown."""
    battery_full_life_time: UInt32 = None
    """Seconds of battery life at full charge, ``0xFFFFFFFF`` when unknown."""


def _power_status_flags(status: SystemPowerStatus) -> ChargingFlags:
    flags = ChargingFlags.NONE
    battery_flag = unless_sentinel(status.battery_flag, BATTERY_FLAG_UNKNOWN)
    if battery_flag is not None:
        if battery_flag & BATTERY_FLAG_CHARGING:
            flags |= ChargingFlags.EXTERNAL_POWER_CHARGING
        if battery_flag & BATTERY_FLAG_CRITICAL:
            flags |= ChargingFlags.CRITICAL_CHARGE
    if status.ac_line_status == AC_LINE_ONLINE:
        flags |= ChargingFlags.EXTERNAL_POWER_CONNECTED
    elif status.ac_line_status == AC_LINE_OFFLINE and not flags & ChargingFlags.EXTERNAL_POWER_CHARGING:
        flags |= ChargingFlags.DISCHARGING
    return resolve_direction(flags)


def normalize_power_status(status: SystemPowerStatus) -> BatteryInfo:
    """Map a :class:`SystemPowerStatus` to a :class:`BatteryInfo`.

    Only an explicit AC-offline reading implies discharging; an unknown
    line status leaves the direction unset.
    """
    flags = _power_status_flags(status)
    battery_flag = status.battery_flag
    has_battery = (
        battery_flag is not None
        and battery_flag != BATTERY_FLAG_UNKNOWN
        and not battery_flag & BATTERY_FLAG_NO_SYSTEM_BATTERY
    )
    charge = unless_sentinel(status.battery_life_percent, BATTERY_PERCENT_UNKNOWN)
    life_time = unless_sentinel(status.battery_life_time, BATTERY_LIFE_UNKNOWN)
    discharging = bool(flags & ChargingFlags.DISCHARGING)
    return BatteryInfo(
        has_battery=has_battery,
        charge_percentage=clamp_percentage(charge) if charge is not None else None,
        charging_flags=flags,
        time_to_discharge_completion=float(life_time) if discharging and life_time is not None else None,
    )


class WindowsBasicSystemBatterySnapshot(SystemBatterySnapshot):
    """Snapshot of the system battery from ``GetSystemPowerStatus``."""

    def __init__(self, status: SystemPowerStatus) -> None:
        self._status = status

    @property
    def status(self) -> SystemPowerStatus:
        return self._status

    def primary_info(self) -> BatteryInfo:
        return normalize_power_status(self._status)

    def all_infos(self) -> list[BatteryInfo]:
        return [normalize_power_status(self._status)]

    def details_text(self) -> str:
        return self._status.details_text()


# ---------------------------------------------------------------------------
# IOCTL_BATTERY_QUERY_INFORMATION / IOCTL_BATTERY_QUERY_STATUS
# ---------------------------------------------------------------------------


class DeviceIoBatteryState(RawBatteryState):
    """Raw battery-device record.

    Capacities are mWh and ``rate`` is signed mW unless ``capabilities``
    carries the relative-capacity bit, in which case their unit is
    undefined.
    """

    model_config = ConfigDict(alias_generator=to_pascal)

    capabilities: UInt32 = None
    power_state: UInt32 = None
    capacity: UInt32 = None
    full_charged_capacity: UInt32 = None
    designed_capacity: UInt32 = None
    rate: Int32 = None
    voltage: UInt32 = None
    """Terminal voltage (mV)."""
    temperature: UInt32 = None
    """Temperature in tenths of a Kelvin, 0 when not reported."""
    estimated_time: UInt32 = None
    """Seconds to full discharge at the current rate."""

    def _format_value(self, source: str, value: Any) -> str:
        if source in ("Capabilities", "PowerState"):
            return _hex(value)
        return super()._format_value(source, value)

    @property
    def is_system_battery(self) -> bool:
        return bool((self.capabilities or 0) & BATTERY_SYSTEM_BATTERY)

    @property
    def capacity_is_relative(self) -> bool:
        return bool((self.capabilities or 0) & BATTERY_CAPACITY_RELATIVE)


def _device_io_flags(power_state: int | None) -> ChargingFlags:
    flags = ChargingFlags.NONE
    if power_state is None:
        return flags
    if power_state & BATTERY_POWER_ON_LINE:
        flags |= ChargingFlags.EXTERNAL_POWER_CONNECTED
    if power_state & BATTERY_CHARGING:
        flags |= ChargingFlags.EXTERNAL_POWER_CHARGING
    if power_state & BATTERY_DISCHARGING:
        flags |= ChargingFlags.DISCHARGING
    if power_state & BATTERY_CRITICAL:
        flags |= ChargingFlags.FAILURE_IMMINENT
    return resolve_direction(flags)


def _mwh(value: int | None) -> CapacityValue | None:
    return CapacityValue.from_milliwatt_hours(value) if value is not None else None


def normalize_device_io_state(state: DeviceIoBatteryState) -> BatteryInfo:
    """Map a :class:`DeviceIoBatteryState` to a :class:`BatteryInfo`."""
    flags = _device_io_flags(state.power_state)
    capacity = unless_sentinel(state.capacity, BATTERY_UNKNOWN_CAPACITY)
    full = unless_sentinel(state.full_charged_capacity, BATTERY_UNKNOWN_CAPACITY)
    design = unless_sentinel(state.designed_capacity, BATTERY_UNKNOWN_CAPACITY)
    rate = unless_sentinel(state.rate, BATTERY_UNKNOWN_RATE)
    voltage = unless_sentinel(state.voltage, BATTERY_UNKNOWN_VOLTAGE)
    estimated_time = unless_sentinel(state.estimated_time, BATTERY_UNKNOWN_TIME)

    temperature = None
    if state.temperature:
        temperature = state.temperature * 0.1 - KELVIN_OFFSET

    absolute = not state.capacity_is_relative
    discharging = bool(flags & ChargingFlags.DISCHARGING)
    return BatteryInfo(
        has_battery=True,
        charge_percentage=percentage(capacity, full),
        charge_health_percentage=percentage(full, design) if absolute else None,
        current_charge_capacity=_mwh(capacity) if absolute else None,
        max_charge_capacity=_mwh(full) if absolute else None,
        design_charge_capacity=_mwh(design) if absolute else None,
        charge_rate=rate / 1000.0 if absolute and rate is not None else None,
        voltage=float(voltage) if voltage is not None else None,
        temperature=temperature,
        charging_flags=flags,
        time_to_discharge_completion=float(estimated_time) if discharging and estimated_time is not None else None,
    )


class WindowsDeviceIoSystemBatterySnapshot(MultiBatterySnapshot[DeviceIoBatteryState]):
    """Snapshot over the system batteries among a set of battery devices.

    Devices without the system-battery capability (UPS units and the
    like) are left out.
    """

    def __init__(self, states: Iterable[DeviceIoBatteryState]) -> None:
        states = list(states)
        system = [state for state in states if state.is_system_battery]
        if len(system) != len(states):
            _logger.debug("Skipping %d non-system battery devices", len(states) - len(system))
        super().__init__(system)

    def normalize(self, state: DeviceIoBatteryState) -> BatteryInfo:
        return normalize_device_io_state(state)
