"""Data models for normalized battery telemetry."""

from pycello.models._base import RawBatteryState
from pycello.models.battery import BatteryInfo, ChargeStatus, ChargingFlags, resolve_direction
from pycello.models.capacity import CapacityUnit, CapacityValue, capacity_percentage

__all__ = [
    "BatteryInfo",
    "CapacityUnit",
    "CapacityValue",
    "ChargeStatus",
    "ChargingFlags",
    "RawBatteryState",
    "capacity_percentage",
    "resolve_direction",
]
