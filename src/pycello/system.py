"""Snapshot of the current machine's batteries.

Picks the battery source for the running operating system:

* macOS: ``ioreg`` registry dump
* Linux: ``/sys/class/power_supply``
* Windows: ``GetSystemPowerStatus``
"""

from __future__ import annotations

import asyncio
import logging
import sys

from pycello._sources import ioreg as ioreg_source
from pycello._sources import sysfs, win32
from pycello.config import CelloConfig
from pycello.exceptions import CelloPlatformUnsupportedError
from pycello.platforms.apple import AppleSystemBatterySnapshot
from pycello.platforms.linux import LinuxSystemBatterySnapshot
from pycello.platforms.windows import WindowsBasicSystemBatterySnapshot
from pycello.snapshot import SystemBatterySnapshot

_logger = logging.getLogger(__name__)

_SUPPORTED_PLATFORMS = ("darwin", "linux", "win32")


def _platform() -> str:
    for name in _SUPPORTED_PLATFORMS:
        if sys.platform.startswith(name):
            return name
    return sys.platform


def is_system_snapshot_supported() -> bool:
    """Whether :func:`create_system_snapshot` can run on this platform."""
    return _platform() in _SUPPORTED_PLATFORMS


def _unsupported() -> CelloPlatformUnsupportedError:
    return CelloPlatformUnsupportedError(
        f"Battery snapshots are not supported on {sys.platform!r}",
        platform=sys.platform,
    )


def create_system_snapshot(config: CelloConfig | None = None) -> SystemBatterySnapshot:
    """Read the system batteries once and return a snapshot.

    Raises
    ------
    CelloPlatformUnsupportedError
        No battery source exists for this platform.
    subprocess.CalledProcessError
        ``ioreg`` exited with an error (macOS).
    OSError
        The platform source could not be read.
    """
    config = config or CelloConfig()
    platform = _platform()
    _logger.debug("Creating %s battery snapshot", platform)
    if platform == "darwin":
        lines = ioreg_source.read_ioreg_lines(config.ioreg_command, config.ioreg_class)
        return AppleSystemBatterySnapshot.from_ioreg_lines(lines, battery_class=config.ioreg_class)
    if platform == "linux":
        value_maps = sysfs.read_all_battery_values(config.power_supply_dir, config.battery_name_pattern)
        return LinuxSystemBatterySnapshot.from_value_maps(value_maps, strict=config.strict_attributes)
    if platform == "win32":
        return WindowsBasicSystemBatterySnapshot(win32.read_system_power_status())
    raise _unsupported()


async def create_system_snapshot_async(config: CelloConfig | None = None) -> SystemBatterySnapshot:
    """Async counterpart of :func:`create_system_snapshot`."""
    config = config or CelloConfig()
    platform = _platform()
    _logger.debug("Creating %s battery snapshot", platform)
    if platform == "darwin":
        reader = await ioreg_source.read_ioreg_stream(config.ioreg_command, config.ioreg_class)
        return await AppleSystemBatterySnapshot.from_ioreg_lines_async(reader, battery_class=config.ioreg_class)
    if platform == "linux":
        value_maps = await sysfs.read_all_battery_values_async(config.power_supply_dir, config.battery_name_pattern)
        return LinuxSystemBatterySnapshot.from_value_maps(value_maps, strict=config.strict_attributes)
    if platform == "win32":
        return WindowsBasicSystemBatterySnapshot(await asyncio.to_thread(win32.read_system_power_status))
    raise _unsupported()
