"""Unit-tagged battery capacity values.

A :class:`CapacityValue` always carries its unit. Arithmetic and ordering
are only defined between values of the same unit; mixing units raises
:class:`~pycello.exceptions.CelloUnitMismatchError`. Moving between
milliampere-hours and milliwatt-hours needs a voltage and is only done
through the explicit ``to_*`` conversions.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict

from pycello.exceptions import CelloUnitMismatchError
from pycello.ingestion.normalize import clamp_percentage


class CapacityUnit(enum.StrEnum):
    """Capacity units."""

    MILLIWATT_HOURS = "mWh"
    MILLIAMPERE_HOURS = "mAh"


class CapacityValue(BaseModel):
    """A capacity in either mAh or mWh."""

    model_config = ConfigDict(frozen=True)

    value: float
    unit: CapacityUnit

    @classmethod
    def from_milliampere_hours(cls, value: float) -> CapacityValue:
        return cls(value=value, unit=CapacityUnit.MILLIAMPERE_HOURS)

    @classmethod
    def from_milliwatt_hours(cls, value: float) -> CapacityValue:
        return cls(value=value, unit=CapacityUnit.MILLIWATT_HOURS)

    def __str__(self) -> str:
        return f"{self.value:g}{self.unit.value}"

    def _require_same_unit(self, other: CapacityValue) -> None:
        if not isinstance(other, CapacityValue):
            raise TypeError(f"expected CapacityValue, got {type(other).__name__}")
        if other.unit != self.unit:
            raise CelloUnitMismatchError(f"cannot combine {self.unit.value} with {other.unit.value}")

    def __lt__(self, other: CapacityValue) -> bool:
        self._require_same_unit(other)
        return self.value < other.value

    def __le__(self, other: CapacityValue) -> bool:
        self._require_same_unit(other)
        return self.value <= other.value

    def __gt__(self, other: CapacityValue) -> bool:
        self._require_same_unit(other)
        return self.value > other.value

    def __ge__(self, other: CapacityValue) -> bool:
        self._require_same_unit(other)
        return self.value >= other.value

    def __add__(self, other: CapacityValue) -> CapacityValue:
        self._require_same_unit(other)
        return CapacityValue(value=self.value + other.value, unit=self.unit)

    def __sub__(self, other: CapacityValue) -> CapacityValue:
        self._require_same_unit(other)
        return CapacityValue(value=self.value - other.value, unit=self.unit)

    def ratio_to(self, other: CapacityValue) -> float:
        """Return ``self / other`` for two values of the same unit.

        Raises :class:`ZeroDivisionError` when *other* is zero.
        """
        self._require_same_unit(other)
        return self.value / other.value

    def is_compatible(self, other: CapacityValue | None) -> bool:
        return other is not None and other.unit == self.unit

    def to_milliwatt_hours(self, voltage_mv: float) -> CapacityValue:
        """Convert to mWh using the given voltage in millivolts."""
        if self.unit is CapacityUnit.MILLIWATT_HOURS:
            return self
        _require_positive_voltage(voltage_mv)
        return CapacityValue.from_milliwatt_hours(self.value * voltage_mv / 1000.0)

    def to_milliampere_hours(self, voltage_mv: float) -> CapacityValue:
        """Convert to mAh using the given voltage in millivolts."""
        if self.unit is CapacityUnit.MILLIAMPERE_HOURS:
            return self
        _require_positive_voltage(voltage_mv)
        return CapacityValue.from_milliampere_hours(self.value * 1000.0 / voltage_mv)


def _require_positive_voltage(voltage_mv: float) -> None:
    if voltage_mv <= 0:
        raise ValueError(f"voltage must be positive to convert capacity units, got {voltage_mv}")


def capacity_percentage(numerator: CapacityValue | None, denominator: CapacityValue | None) -> float | None:
    """Percentage of two capacities, or ``None`` if missing or unit-incompatible."""
    if numerator is None or denominator is None:
        return None
    if not numerator.is_compatible(denominator) or denominator.value <= 0:
        return None
    return clamp_percentage(numerator.ratio_to(denominator) * 100.0)
