"""Internal constants shared across the library."""

IOREG_COMMAND = "ioreg"
IOREG_BATTERY_CLASS = "AppleSmartBattery"
POWER_SUPPLY_DIR = "/sys/class/power_supply"
BATTERY_NAME_PATTERN = r"^BAT\d+"

SECONDS_PER_HOUR = 3600.0
SECONDS_PER_MINUTE = 60.0

# ------------------------------------------------------------------
# Registry dump layout
# ------------------------------------------------------------------

# "+-o " precedes the object name; "  <class " precedes its identifier.
IOREG_OBJECT_NAME_OFFSET = 4
IOREG_OBJECT_ID_OFFSET = 9
# '"' closes the name, then ' = ' precedes the value.
IOREG_VALUE_OFFSET = 4

# ------------------------------------------------------------------
# Linux power-supply attributes
# ------------------------------------------------------------------

UEVENT_FILE = "uevent"
UEVENT_PREFIX = "POWER_SUPPLY_"
UEVENT_DEVTYPE = "power_supply"

# Attributes also read from individual files when an aggregated
# ``uevent`` file is missing or lacks them.
POWER_SUPPLY_ATTRIBUTES: tuple[str, ...] = (
    "alarm",
    "capacity",
    "capacity_level",
    "charge_full",
    "charge_full_design",
    "charge_now",
    "current_now",
    "cycle_count",
    "energy_full",
    "energy_full_design",
    "energy_now",
    "manufacturer",
    "model_name",
    "power_now",
    "present",
    "serial_number",
    "status",
    "technology",
    "temp",
    "type",
    "voltage_min_design",
    "voltage_now",
)

# ------------------------------------------------------------------
# Windows SYSTEM_POWER_STATUS
# ------------------------------------------------------------------

AC_LINE_OFFLINE = 0
AC_LINE_ONLINE = 1
BATTERY_FLAG_CRITICAL = 4
BATTERY_FLAG_CHARGING = 8
BATTERY_FLAG_NO_SYSTEM_BATTERY = 128
BATTERY_FLAG_UNKNOWN = 255
BATTERY_PERCENT_UNKNOWN = 255
BATTERY_LIFE_UNKNOWN = 0xFFFFFFFF

# ------------------------------------------------------------------
# Windows IOCTL_BATTERY_QUERY_* records
# ------------------------------------------------------------------

BATTERY_SYSTEM_BATTERY = 0x80000000
BATTERY_CAPACITY_RELATIVE = 0x40000000
BATTERY_IS_SHORT_TERM = 0x20000000

BATTERY_POWER_ON_LINE = 0x00000001
BATTERY_DISCHARGING = 0x00000002
BATTERY_CHARGING = 0x00000004
BATTERY_CRITICAL = 0x00000008

BATTERY_UNKNOWN_CAPACITY = 0xFFFFFFFF
BATTERY_UNKNOWN_VOLTAGE = 0xFFFFFFFF
BATTERY_UNKNOWN_TIME = 0xFFFFFFFF
BATTERY_UNKNOWN_RATE = -0x80000000  # 0x80000000 read as a signed LONG

KELVIN_OFFSET = 273.15
