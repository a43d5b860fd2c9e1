"""Linux batteries (``/sys/class/power_supply/BAT*``).

Kernel units: ``energy_*`` in µWh, ``charge_*`` in µAh, ``power_now`` in
µW, ``current_now`` in µA, ``voltage_*`` in µV and ``temp`` in tenths of
a degree Celsius. ``power_now`` is unsigned; the direction comes from
``status``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import ConfigDict

from pycello._constants import SECONDS_PER_HOUR
from pycello.exceptions import CelloInvalidDataError
from pycello.ingestion.normalize import Float, Int32, Int64, Text, UInt64, clamp_percentage, percentage
from pycello.models._base import RawBatteryState
from pycello.models.battery import BatteryInfo, ChargingFlags, resolve_direction
from pycello.models.capacity import CapacityValue
from pycello.snapshot import MultiBatterySnapshot

_logger = logging.getLogger(__name__)

_STATUS_CHARGING = "Charging"
_STATUS_DISCHARGING = "Discharging"
_STATUS_NOT_CHARGING = frozenset({"Not charging", "NotCharging"})
_LEVEL_CRITICAL = "Critical"


class LinuxBatteryState(RawBatteryState):
    """Raw power-supply attributes of one battery."""

    model_config = ConfigDict(protected_namespaces=())

    alarm: UInt64 = None
    """Alarm energy level (µWh)."""
    capacity: Float = None
    """Charge in percent."""
    capacity_level: Text = None
    charge_full: UInt64 = None
    charge_full_design: UInt64 = None
    charge_now: UInt64 = None
    current_now: Int64 = None
    cycle_count: Int32 = None
    energy_full: UInt64 = None
    energy_full_design: UInt64 = None
    energy_now: UInt64 = None
    manufacturer: Text = None
    model_name: Text = None
    power_now: UInt64 = None
    present: UInt64 = None
    serial_number: Text = None
    status: Text = None
    technology: Text = None
    temp: Int64 = None
    """Temperature in tenths of a degree Celsius."""
    type: Text = None
    voltage_min_design: UInt64 = None
    voltage_now: UInt64 = None

    @classmethod
    def from_value_map(cls, values: Mapping[str, str], *, strict: bool = False) -> LinuxBatteryState:
        """Build a state from an attribute map.

        Text that does not fit its attribute is dropped unless *strict*,
        in which case :class:`~pycello.exceptions.CelloInvalidDataError`
        propagates.
        """
        state = cls()
        for name, text in values.items():
            try:
                state.update(name, text)
            except CelloInvalidDataError:
                if strict:
                    raise
                _logger.debug("Dropping unparseable %s value %r", name, text)
        return state


def _direction_flags(state: LinuxBatteryState) -> ChargingFlags:
    flags = ChargingFlags.NONE
    if state.status == _STATUS_CHARGING:
        flags |= ChargingFlags.EXTERNAL_POWER_CONNECTED | ChargingFlags.EXTERNAL_POWER_CHARGING
    elif state.status in _STATUS_NOT_CHARGING:
        flags |= ChargingFlags.EXTERNAL_POWER_CONNECTED
    elif state.status == _STATUS_DISCHARGING:
        flags |= ChargingFlags.DISCHARGING
    if state.capacity_level == _LEVEL_CRITICAL:
        flags |= ChargingFlags.CRITICAL_CHARGE
    return resolve_direction(flags)


def _capacities(
    state: LinuxBatteryState,
) -> tuple[CapacityValue | None, CapacityValue | None, CapacityValue | None]:
    if state.energy_now is not None or state.energy_full is not None or state.energy_full_design is not None:
        make = CapacityValue.from_milliwatt_hours
        raw = (state.energy_now, state.energy_full, state.energy_full_design)
    else:
        make = CapacityValue.from_milliampere_hours
        raw = (state.charge_now, state.charge_full, state.charge_full_design)
    now, full, design = (make(v / 1000.0) if v is not None else None for v in raw)
    return now, full, design


def _level_and_rate(state: LinuxBatteryState) -> tuple[int | None, int | None, int | None]:
    """(now, full, rate) in one consistent µ-unit family, energy preferred."""
    if state.power_now is not None and state.energy_now is not None:
        return state.energy_now, state.energy_full, state.power_now
    if state.current_now is not None and state.charge_now is not None:
        return state.charge_now, state.charge_full, abs(state.current_now)
    return None, None, None


def normalize_linux_state(state: LinuxBatteryState) -> BatteryInfo:
    """Map a :class:`LinuxBatteryState` to a :class:`BatteryInfo`."""
    flags = _direction_flags(state)
    charging = bool(flags & ChargingFlags.EXTERNAL_POWER_CHARGING)
    discharging = bool(flags & ChargingFlags.DISCHARGING)

    if state.capacity is not None:
        charge_percentage = clamp_percentage(state.capacity)
    elif state.energy_now is not None and state.energy_full is not None:
        charge_percentage = percentage(state.energy_now, state.energy_full)
    else:
        charge_percentage = percentage(state.charge_now, state.charge_full)

    health = percentage(state.energy_full, state.energy_full_design)
    if health is None:
        health = percentage(state.charge_full, state.charge_full_design)

    charge_rate = None
    if state.power_now is not None:
        charge_rate = state.power_now / 1_000_000.0
    elif state.current_now is not None and state.voltage_now is not None:
        charge_rate = abs(state.current_now) * state.voltage_now / 1_000_000_000_000.0
    if charge_rate is not None and discharging:
        charge_rate = -charge_rate

    time_to_empty = None
    time_to_full = None
    now, full, rate = _level_and_rate(state)
    if now is not None and rate:
        if discharging:
            time_to_empty = now / rate * SECONDS_PER_HOUR
        elif charging and full is not None:
            time_to_full = (max(full, now) - now) / rate * SECONDS_PER_HOUR

    current, maximum, design = _capacities(state)
    return BatteryInfo(
        has_battery=state.present != 0 if state.present is not None else True,
        charge_percentage=charge_percentage,
        charge_health_percentage=health,
        current_charge_capacity=current,
        max_charge_capacity=maximum,
        design_charge_capacity=design,
        charge_rate=charge_rate,
        voltage=state.voltage_now / 1000.0 if state.voltage_now is not None else None,
        temperature=state.temp / 10.0 if state.temp is not None else None,
        charging_flags=flags,
        time_to_discharge_completion=time_to_empty,
        time_to_charge_completion=time_to_full,
    )


class LinuxSystemBatterySnapshot(MultiBatterySnapshot[LinuxBatteryState]):
    """Snapshot of every battery under the power-supply directory."""

    def normalize(self, state: LinuxBatteryState) -> BatteryInfo:
        return normalize_linux_state(state)

    @classmethod
    def from_value_maps(
        cls,
        value_maps: list[Mapping[str, str]],
        *,
        strict: bool = False,
    ) -> LinuxSystemBatterySnapshot:
        return cls(LinuxBatteryState.from_value_map(values, strict=strict) for values in value_maps)
