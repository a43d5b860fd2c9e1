from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pycello._sources.sysfs import (
    battery_directories,
    read_all_battery_values,
    read_all_battery_values_async,
    read_battery_values,
)
from pycello.exceptions import CelloFormatError, CelloInvalidDataError
from pycello.ingestion.uevent import parse_uevent, power_supply_values
from pycello.models.battery import BatteryInfo, ChargeStatus, ChargingFlags
from pycello.models.capacity import CapacityUnit, CapacityValue
from pycello.platforms.linux import LinuxBatteryState, LinuxSystemBatterySnapshot, normalize_linux_state

BAT0_UEVENT = """\
DEVTYPE=power_supply
POWER_SUPPLY_NAME=BAT0
POWER_SUPPLY_TYPE=Battery
POWER_SUPPLY_STATUS=Discharging
POWER_SUPPLY_PRESENT=1
POWER_SUPPLY_TECHNOLOGY=Li-poly
POWER_SUPPLY_CYCLE_COUNT=87
POWER_SUPPLY_VOLTAGE_MIN_DESIGN=15480000
POWER_SUPPLY_VOLTAGE_NOW=16120000
POWER_SUPPLY_POWER_NOW=5000000
POWER_SUPPLY_ENERGY_FULL_DESIGN=57000000
POWER_SUPPLY_ENERGY_FULL=50000000
POWER_SUPPLY_ENERGY_NOW=2000000
POWER_SUPPLY_CAPACITY=4
POWER_SUPPLY_CAPACITY_LEVEL=Critical
POWER_SUPPLY_MODEL_NAME=5B10W13975
POWER_SUPPLY_MANUFACTURER=SMP
POWER_SUPPLY_SERIAL_NUMBER= 1234
"""


def _write_device(root: Path, name: str, files: dict[str, str]) -> Path:
    device = root / name
    device.mkdir(parents=True)
    for file_name, text in files.items():
        (device / file_name).write_text(text, encoding="utf-8")
    return device


def test_parse_uevent_last_write_wins_and_skips_blank_lines() -> None:
    values = parse_uevent(["A=1", "", "  B = two words ", "A=3"])
    assert values == {"A": "3", "B": "two words "}


def test_parse_uevent_rejects_malformed_line() -> None:
    with pytest.raises(CelloFormatError):
        parse_uevent(["DEVTYPE=power_supply", "not a pair"])


def test_power_supply_values_strips_prefix_and_lowercases() -> None:
    values = power_supply_values(
        {"DEVTYPE": "power_supply", "POWER_SUPPLY_ENERGY_NOW": "1", "power_supply_Status": "Full"},
        {"energy_now": "99", "temp": "250"},
    )
    assert values == {"energy_now": "1", "status": "Full", "temp": "250"}


def test_power_supply_values_requires_devtype() -> None:
    assert power_supply_values({"POWER_SUPPLY_ENERGY_NOW": "1"}) is None
    assert power_supply_values({"DEVTYPE": "usb", "POWER_SUPPLY_ENERGY_NOW": "1"}) is None


def test_discharging_energy_battery() -> None:
    values = power_supply_values(parse_uevent(BAT0_UEVENT.splitlines()))
    assert values is not None
    info = normalize_linux_state(LinuxBatteryState.from_value_map(values))

    assert info.has_battery
    assert info.charge_rate == pytest.approx(-5.0)
    assert info.time_to_discharge_completion == pytest.approx(1440.0)
    assert info.time_to_charge_completion is None
    assert info.charge_percentage == 4.0
    assert info.charge_health_percentage == pytest.approx(50 / 57 * 100)
    assert info.current_charge_capacity == CapacityValue.from_milliwatt_hours(2000)
    assert info.max_charge_capacity == CapacityValue.from_milliwatt_hours(50000)
    assert info.design_charge_capacity is not None
    assert info.design_charge_capacity.unit is CapacityUnit.MILLIWATT_HOURS
    assert info.voltage == pytest.approx(16120.0)
    assert info.charging_flags == ChargingFlags.DISCHARGING | ChargingFlags.CRITICAL_CHARGE
    assert info.charge_status == ChargeStatus.DISCHARGING


def test_charging_charge_battery() -> None:
    state = LinuxBatteryState.from_value_map(
        {
            "status": "Charging",
            "present": "1",
            "charge_now": "2000000",
            "charge_full": "4000000",
            "charge_full_design": "5000000",
            "current_now": "1000000",
            "voltage_now": "12000000",
            "temp": "315",
        }
    )
    info = normalize_linux_state(state)

    assert info.charging_flags == ChargingFlags.EXTERNAL_POWER_CONNECTED | ChargingFlags.EXTERNAL_POWER_CHARGING
    assert info.charge_percentage == pytest.approx(50.0)
    assert info.charge_health_percentage == pytest.approx(80.0)
    assert info.current_charge_capacity == CapacityValue.from_milliampere_hours(2000)
    assert info.charge_rate == pytest.approx(12.0)
    assert info.time_to_charge_completion == pytest.approx(7200.0)
    assert info.time_to_discharge_completion is None
    assert info.temperature == pytest.approx(31.5)


@pytest.mark.parametrize("status", ["Not charging", "NotCharging"])
def test_not_charging_means_plugged_in(status: str) -> None:
    info = normalize_linux_state(LinuxBatteryState.from_value_map({"status": status}))
    assert info.charging_flags == ChargingFlags.EXTERNAL_POWER_CONNECTED
    assert info.charge_status == ChargeStatus.PLUGGED_IN


def test_full_status_sets_no_direction() -> None:
    info = normalize_linux_state(LinuxBatteryState.from_value_map({"status": "Full", "power_now": "0"}))
    assert info.charging_flags == ChargingFlags.NONE
    assert info.time_to_charge_completion is None


def test_zero_power_gives_no_time() -> None:
    state = LinuxBatteryState.from_value_map({"status": "Discharging", "energy_now": "100", "power_now": "0"})
    assert normalize_linux_state(state).time_to_discharge_completion is None


def test_absent_battery() -> None:
    info = normalize_linux_state(LinuxBatteryState.from_value_map({"present": "0"}))
    assert not info.has_battery


def test_unknown_presence_defaults_to_battery() -> None:
    assert normalize_linux_state(LinuxBatteryState()).has_battery


def test_unparseable_attribute_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="pycello.platforms.linux"):
        state = LinuxBatteryState.from_value_map({"energy_now": "n/a", "energy_full": "100"})
    assert state.energy_now is None
    assert state.energy_full == 100
    assert "energy_now" in caplog.text


def test_unparseable_attribute_raises_when_strict() -> None:
    with pytest.raises(CelloInvalidDataError):
        LinuxBatteryState.from_value_map({"energy_now": "n/a"}, strict=True)


def test_sysfs_tree(tmp_path: Path) -> None:
    _write_device(tmp_path, "BAT0", {"uevent": BAT0_UEVENT, "temp": "250\n"})
    _write_device(
        tmp_path,
        "BAT1",
        {"status": "Charging\n", "capacity": "80\n", "present": "1\n"},
    )
    _write_device(tmp_path, "AC", {"uevent": "DEVTYPE=power_supply\nPOWER_SUPPLY_ONLINE=0\n"})
    _write_device(tmp_path, "BAT2", {"uevent": "DEVTYPE=usb\n"})

    names = sorted(d.name for d in battery_directories(tmp_path))
    assert names == ["BAT0", "BAT1", "BAT2"]

    bat0 = read_battery_values(tmp_path / "BAT0")
    assert bat0 is not None
    assert bat0["temp"] == "250"
    assert bat0["energy_now"] == "2000000"
    assert read_battery_values(tmp_path / "BAT2") is None

    value_maps = read_all_battery_values(tmp_path)
    assert len(value_maps) == 2
    snapshot = LinuxSystemBatterySnapshot.from_value_maps(value_maps)
    infos = snapshot.all_infos()
    assert sorted(info.charge_percentage for info in infos) == [4.0, 80.0]


def test_missing_power_supply_dir(tmp_path: Path) -> None:
    assert read_all_battery_values(tmp_path / "missing") == []
    snapshot = LinuxSystemBatterySnapshot.from_value_maps([])
    assert snapshot.primary_info() == BatteryInfo.no_battery()
    assert snapshot.all_infos() == []
    assert snapshot.details_text() == "[]"


@pytest.mark.asyncio
async def test_async_read_matches_sync_read(tmp_path: Path) -> None:
    for index in range(4):
        _write_device(tmp_path, f"BAT{index}", {"capacity": f"{index * 10}\n", "status": "Full\n"})

    assert await read_all_battery_values_async(tmp_path) == read_all_battery_values(tmp_path)


def test_name_pattern_is_configurable(tmp_path: Path) -> None:
    _write_device(tmp_path, "BAT0", {"capacity": "10\n"})
    _write_device(tmp_path, "CMB0", {"capacity": "20\n"})
    assert [d.name for d in battery_directories(tmp_path, r"^CMB\d+")] == ["CMB0"]


def test_details_text_lists_every_device() -> None:
    snapshot = LinuxSystemBatterySnapshot.from_value_maps([{"capacity": "10"}, {"capacity": "20"}])
    details = snapshot.details_text()
    assert details.startswith("[\n{")
    assert details.endswith("}\n]")
    assert details.count("    capacity = ") == 2
