"""``GetSystemPowerStatus`` through :mod:`ctypes` (Windows only)."""

from __future__ import annotations

import ctypes
import logging

from pycello.platforms.windows import SystemPowerStatus

_logger = logging.getLogger(__name__)


class SYSTEM_POWER_STATUS(ctypes.Structure):  # noqa: N801
    _fields_ = [
        ("ACLineStatus", ctypes.c_ubyte),
        ("BatteryFlag", ctypes.c_ubyte),
        ("BatteryLifePercent", ctypes.c_ubyte),
        ("SystemStatusFlag", ctypes.c_ubyte),
        ("BatteryLifeTime", ctypes.c_ulong),
        ("BatteryFullLifeTime", ctypes.c_ulong),
    ]


def status_from_struct(raw: SYSTEM_POWER_STATUS) -> SystemPowerStatus:
    status = SystemPowerStatus()
    for name, _ in SYSTEM_POWER_STATUS._fields_:
        status.update(name, str(getattr(raw, name)))
    return status


def read_system_power_status() -> SystemPowerStatus:
    """Query the system power status.

    Raises :class:`OSError` (via :func:`ctypes.WinError`) when the call
    fails.
    """
    raw = SYSTEM_POWER_STATUS()
    if not ctypes.windll.kernel32.GetSystemPowerStatus(ctypes.byref(raw)):  # type: ignore[attr-defined]
        raise ctypes.WinError()  # type: ignore[attr-defined]
    _logger.debug("GetSystemPowerStatus ACLineStatus=%d BatteryFlag=%d", raw.ACLineStatus, raw.BatteryFlag)
    return status_from_struct(raw)
