"""Canonical battery info model.

Every platform engine produces a :class:`BatteryInfo`. Values are
constructed fresh for each snapshot and are immutable afterwards.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from pycello.models.capacity import CapacityValue


class ChargingFlags(enum.IntFlag):
    """Flags for charging status."""

    NONE = 0
    DISCHARGING = 1 << 0
    EXTERNAL_POWER_CONNECTED = 1 << 1
    EXTERNAL_POWER_CHARGING = 1 << 2
    CRITICAL_CHARGE = 1 << 3
    """Charge is at a critical level, generally as decided by the OS."""
    FAILURE_IMMINENT = 1 << 4
    """Battery failure is imminent, generally as reported by the battery system."""


def resolve_direction(flags: ChargingFlags) -> ChargingFlags:
    """Drop ``DISCHARGING`` when ``EXTERNAL_POWER_CHARGING`` is also set."""
    if flags & ChargingFlags.EXTERNAL_POWER_CHARGING and flags & ChargingFlags.DISCHARGING:
        return flags & ~ChargingFlags.DISCHARGING
    return flags


class ChargeStatus(enum.StrEnum):
    """Single status label derived from :class:`ChargingFlags`."""

    CHARGING = "charging"
    PLUGGED_IN = "plugged in"
    DISCHARGING = "discharging"
    NOT_AVAILABLE = "n/a"


class BatteryInfo(BaseModel):
    """Normalized battery info.

    Units: percentages in [0, 100], ``charge_rate`` in watts (positive
    while charging, negative while discharging), ``voltage`` in
    millivolts, ``temperature`` in degrees Celsius and remaining times in
    seconds. Capacities carry their own unit.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    has_battery: bool = False
    charge_percentage: float | None = None
    charge_health_percentage: float | None = None
    current_charge_capacity: CapacityValue | None = None
    max_charge_capacity: CapacityValue | None = None
    design_charge_capacity: CapacityValue | None = None
    charge_rate: float | None = None
    voltage: float | None = None
    temperature: float | None = None
    charging_flags: ChargingFlags = ChargingFlags.NONE
    time_to_discharge_completion: float | None = None
    time_to_charge_completion: float | None = None

    @classmethod
    def no_battery(cls) -> BatteryInfo:
        return cls(has_battery=False)

    @field_validator("charge_percentage", "charge_health_percentage")
    @classmethod
    def _check_percentage(cls, value: float | None) -> float | None:
        if value is not None and not 0.0 <= value <= 100.0:
            raise ValueError(f"percentage must be within [0, 100], got {value}")
        return value

    @model_validator(mode="after")
    def _check_direction(self) -> BatteryInfo:
        flags = self.charging_flags
        if flags & ChargingFlags.EXTERNAL_POWER_CHARGING and flags & ChargingFlags.DISCHARGING:
            raise ValueError("charging_flags cannot be both charging and discharging")
        return self

    @property
    def charge_status(self) -> ChargeStatus:
        flags = self.charging_flags
        if flags & ChargingFlags.EXTERNAL_POWER_CHARGING:
            return ChargeStatus.CHARGING
        if flags & ChargingFlags.EXTERNAL_POWER_CONNECTED:
            return ChargeStatus.PLUGGED_IN
        if flags & ChargingFlags.DISCHARGING:
            return ChargeStatus.DISCHARGING
        return ChargeStatus.NOT_AVAILABLE

    @property
    def capacity_ordering_holds(self) -> bool:
        """Whether ``current <= max <= design`` holds among same-unit capacities.

        Pairs that are missing or carry different units are not compared.
        """
        ordered = [
            c
            for c in (self.current_charge_capacity, self.max_charge_capacity, self.design_charge_capacity)
            if c is not None
        ]
        for lower, upper in zip(ordered, ordered[1:]):
            if lower.is_compatible(upper) and lower > upper:
                return False
        return True
