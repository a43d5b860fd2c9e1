"""Apple Mac batteries (``AppleSmartBattery`` registry objects).

Field meanings as observed in ``ioreg -c AppleSmartBattery -w0`` output:

* ``AppleRaw*`` capacities are mAh; ``CurrentCapacity``/``MaxCapacity``
  are mAh on Intel Macs and a 0-100 scale on Apple silicon, so only their
  ratio is used.
* ``Amperage`` is signed mA but printed as an unsigned 64-bit number when
  negative.
* ``AvgTimeToEmpty``/``AvgTimeToFull`` are minutes; ``65535`` means
  "not applicable" and reads as ``-1`` once reinterpreted as 16 bits.
* ``VirtualTemperature`` is hundredths of a degree Celsius.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Iterable
from datetime import UTC, datetime
from typing import Any

from pydantic import ConfigDict
from pydantic.alias_generators import to_pascal

from pycello._constants import IOREG_BATTERY_CLASS, SECONDS_PER_MINUTE
from pycello.ingestion.ioreg import IORegEvent, parse_ioreg, parse_ioreg_async
from pycello.ingestion.normalize import Int16, Int32, Int64, UInt64, YesNo, non_negative_or_none, percentage
from pycello.models._base import RawBatteryState
from pycello.models.battery import BatteryInfo, ChargingFlags, resolve_direction
from pycello.models.capacity import CapacityValue
from pycello.snapshot import SystemBatterySnapshot

_logger = logging.getLogger(__name__)


class AppleBatteryState(RawBatteryState):
    """Raw ``AppleSmartBattery`` properties, keyed by their registry names."""

    model_config = ConfigDict(alias_generator=to_pascal)

    apple_raw_current_capacity: Int32 = None
    """Raw current capacity (mAh)."""
    apple_raw_max_capacity: Int32 = None
    """Raw full-charge capacity (mAh)."""
    apple_raw_battery_voltage: Int32 = None
    """Raw battery voltage (mV)."""
    current_capacity: Int32 = None
    """Current capacity relative to ``max_capacity``."""
    nominal_charge_capacity: Int32 = None
    """Nominal charge capacity (mAh)."""
    max_capacity: Int32 = None
    design_capacity: Int32 = None
    """Design capacity (mAh)."""
    voltage: Int32 = None
    """Voltage (mV)."""
    is_charging: YesNo = None
    battery_installed: YesNo = None
    at_critical_level: YesNo = None
    virtual_temperature: Int32 = None
    """Temperature in hundredths of a degree Celsius."""
    amperage: Int64 = None
    """Current in mA, negative while discharging."""
    cycle_count: Int64 = None
    external_connected: YesNo = None
    external_charge_capable: YesNo = None
    update_time: UInt64 = None
    """Unix time of the last state update."""
    design_cycle_count_9c: Int32 = None
    fully_charged: YesNo = None
    time_remaining: Int16 = None
    """Minutes left for the current operation, -1 when none is running."""
    avg_time_to_full: Int16 = None
    """Minutes to full charge, -1 when not charging."""
    avg_time_to_empty: Int16 = None
    """Minutes to empty, -1 when not discharging."""

    def _format_value(self, source: str, value: Any) -> str:
        if source == "UpdateTime" and value is not None:
            try:
                stamp = datetime.fromtimestamp(value, tz=UTC).isoformat()
            except (OverflowError, OSError, ValueError):
                return str(value)
            return f"{value} /* {stamp} */"
        return super()._format_value(source, value)


def _minutes_to_seconds(minutes: int | None) -> float | None:
    minutes = non_negative_or_none(minutes)
    if minutes is None:
        return None
    return minutes * SECONDS_PER_MINUTE


def _mah(value: int | None) -> CapacityValue | None:
    return CapacityValue.from_milliampere_hours(value) if value is not None else None


def normalize_apple_state(state: AppleBatteryState) -> BatteryInfo:
    """Map an :class:`AppleBatteryState` to a :class:`BatteryInfo`."""
    flags = ChargingFlags.NONE
    if state.external_connected:
        flags |= ChargingFlags.EXTERNAL_POWER_CONNECTED
    if state.is_charging:
        flags |= ChargingFlags.EXTERNAL_POWER_CHARGING
    elif state.amperage is not None and state.amperage < 0:
        flags |= ChargingFlags.DISCHARGING
    if state.at_critical_level:
        flags |= ChargingFlags.CRITICAL_CHARGE
    flags = resolve_direction(flags)

    voltage = state.apple_raw_battery_voltage if state.apple_raw_battery_voltage is not None else state.voltage
    charge_rate = None
    if voltage is not None and state.amperage is not None:
        charge_rate = voltage * state.amperage / 1_000_000.0

    temperature = None
    if state.virtual_temperature is not None:
        temperature = state.virtual_temperature / 100.0

    charging = bool(flags & ChargingFlags.EXTERNAL_POWER_CHARGING)
    discharging = bool(flags & ChargingFlags.DISCHARGING)

    return BatteryInfo(
        has_battery=bool(state.battery_installed),
        charge_percentage=percentage(state.current_capacity, state.max_capacity),
        charge_health_percentage=percentage(state.apple_raw_max_capacity, state.design_capacity),
        current_charge_capacity=_mah(state.apple_raw_current_capacity),
        max_charge_capacity=_mah(state.apple_raw_max_capacity),
        design_charge_capacity=_mah(state.design_capacity),
        charge_rate=charge_rate,
        voltage=float(voltage) if voltage is not None else None,
        temperature=temperature,
        charging_flags=flags,
        time_to_discharge_completion=_minutes_to_seconds(state.avg_time_to_empty) if discharging else None,
        time_to_charge_completion=_minutes_to_seconds(state.avg_time_to_full) if charging else None,
    )


def fold_apple_events(
    events: Iterable[IORegEvent],
    *,
    battery_class: str = IOREG_BATTERY_CLASS,
) -> AppleBatteryState:
    """Fold registry property events into a fresh :class:`AppleBatteryState`.

    Only properties whose innermost object is named *battery_class* are
    used. Unknown property names are ignored.
    """
    state = AppleBatteryState()
    matched = 0
    for event in events:
        if event.obj.name != battery_class:
            continue
        if state.update(event.prop.name, event.prop.value):
            matched += 1
    _logger.debug("Applied %d %s properties", matched, battery_class)
    return state


class AppleSystemBatterySnapshot(SystemBatterySnapshot):
    """Snapshot of the system battery on an Apple Mac."""

    def __init__(self, state: AppleBatteryState) -> None:
        self._state = state

    @property
    def state(self) -> AppleBatteryState:
        return self._state

    def primary_info(self) -> BatteryInfo:
        return normalize_apple_state(self._state)

    def all_infos(self) -> list[BatteryInfo]:
        return [normalize_apple_state(self._state)]

    def details_text(self) -> str:
        return self._state.details_text()

    @classmethod
    def from_ioreg_lines(
        cls,
        lines: Iterable[str | bytes],
        *,
        battery_class: str = IOREG_BATTERY_CLASS,
    ) -> AppleSystemBatterySnapshot:
        """Build a snapshot from registry dump text, one line at a time."""
        return cls(fold_apple_events(parse_ioreg(lines), battery_class=battery_class))

    @classmethod
    async def from_ioreg_lines_async(
        cls,
        lines: AsyncIterable[str | bytes],
        *,
        battery_class: str = IOREG_BATTERY_CLASS,
    ) -> AppleSystemBatterySnapshot:
        """Async counterpart of :meth:`from_ioreg_lines`."""
        events = await parse_ioreg_async(lines)
        return cls(fold_apple_events(events, battery_class=battery_class))
