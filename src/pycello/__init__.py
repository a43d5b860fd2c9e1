"""pycello - normalized battery telemetry for macOS, Linux and Windows."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pycello")
except PackageNotFoundError:
    __version__ = "0+local"
from pycello.config import CelloConfig
from pycello.exceptions import (
    CelloError,
    CelloFormatError,
    CelloInvalidDataError,
    CelloPlatformUnsupportedError,
    CelloUnitMismatchError,
)
from pycello.models import (
    BatteryInfo,
    CapacityUnit,
    CapacityValue,
    ChargeStatus,
    ChargingFlags,
)
from pycello.platforms import (
    AppleSystemBatterySnapshot,
    LinuxSystemBatterySnapshot,
    WindowsBasicSystemBatterySnapshot,
    WindowsDeviceIoSystemBatterySnapshot,
)
from pycello.snapshot import SystemBatterySnapshot
from pycello.system import create_system_snapshot, create_system_snapshot_async, is_system_snapshot_supported

__all__ = [
    "__version__",
    "AppleSystemBatterySnapshot",
    "BatteryInfo",
    "CapacityUnit",
    "CapacityValue",
    "CelloConfig",
    "CelloError",
    "CelloFormatError",
    "CelloInvalidDataError",
    "CelloPlatformUnsupportedError",
    "CelloUnitMismatchError",
    "ChargeStatus",
    "ChargingFlags",
    "LinuxSystemBatterySnapshot",
    "SystemBatterySnapshot",
    "WindowsBasicSystemBatterySnapshot",
    "WindowsDeviceIoSystemBatterySnapshot",
    "create_system_snapshot",
    "create_system_snapshot_async",
    "is_system_snapshot_supported",
]
