"""Battery snapshot contract.

A snapshot holds the raw state read from one platform source at one
point in time and normalizes it on demand. Every platform exposes the
same three views: the primary battery, all batteries and a raw-state text
dump.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable
from typing import Generic, TypeVar

from pycello.models._base import RawBatteryState
from pycello.models.battery import BatteryInfo

StateT = TypeVar("StateT", bound=RawBatteryState)


class SystemBatterySnapshot(abc.ABC):
    """Snapshot of the state of the system batteries."""

    @abc.abstractmethod
    def primary_info(self) -> BatteryInfo:
        """Normalized info for the primary battery."""

    @abc.abstractmethod
    def all_infos(self) -> list[BatteryInfo]:
        """Normalized info for every battery, in source order."""

    @abc.abstractmethod
    def details_text(self) -> str:
        """Raw state dump for diagnostics."""


class MultiBatterySnapshot(SystemBatterySnapshot, Generic[StateT]):
    """Snapshot over an ordered list of per-device raw states.

    Each state is normalized independently. The first state is the
    primary battery; with no states the primary view reports no battery.
    Order is whatever order the source enumerated devices in.
    """

    def __init__(self, states: Iterable[StateT]) -> None:
        self._states: tuple[StateT, ...] = tuple(states)

    @property
    def states(self) -> tuple[StateT, ...]:
        return self._states

    @abc.abstractmethod
    def normalize(self, state: StateT) -> BatteryInfo:
        """Map one raw device state to a :class:`BatteryInfo`."""

    def primary_info(self) -> BatteryInfo:
        if not self._states:
            return BatteryInfo.no_battery()
        return self.normalize(self._states[0])

    def all_infos(self) -> list[BatteryInfo]:
        return [self.normalize(state) for state in self._states]

    def details_text(self) -> str:
        body = ",\n".join(state.details_text() for state in self._states)
        return f"[\n{body}\n]" if body else "[]"
