"""Per-platform raw states, normalization engines and snapshots."""

from pycello.platforms.apple import AppleBatteryState, AppleSystemBatterySnapshot, normalize_apple_state
from pycello.platforms.linux import LinuxBatteryState, LinuxSystemBatterySnapshot, normalize_linux_state
from pycello.platforms.windows import (
    DeviceIoBatteryState,
    SystemPowerStatus,
    WindowsBasicSystemBatterySnapshot,
    WindowsDeviceIoSystemBatterySnapshot,
    normalize_device_io_state,
    normalize_power_status,
)

__all__ = [
    "AppleBatteryState",
    "AppleSystemBatterySnapshot",
    "DeviceIoBatteryState",
    "LinuxBatteryState",
    "LinuxSystemBatterySnapshot",
    "SystemPowerStatus",
    "WindowsBasicSystemBatterySnapshot",
    "WindowsDeviceIoSystemBatterySnapshot",
    "normalize_apple_state",
    "normalize_device_io_state",
    "normalize_linux_state",
    "normalize_power_status",
]
