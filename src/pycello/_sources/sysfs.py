"""Read battery attribute maps from the Linux power-supply class directory."""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from pycello._constants import BATTERY_NAME_PATTERN, POWER_SUPPLY_ATTRIBUTES, POWER_SUPPLY_DIR, UEVENT_FILE
from pycello.ingestion.uevent import parse_uevent, power_supply_values

_logger = logging.getLogger(__name__)


def battery_directories(
    root: str | Path = POWER_SUPPLY_DIR,
    name_pattern: str = BATTERY_NAME_PATTERN,
) -> list[Path]:
    """Battery device directories under *root*, in listing order.

    A missing *root* means no batteries.
    """
    root = Path(root)
    if not root.is_dir():
        _logger.debug("No power-supply directory at %s", root)
        return []
    pattern = re.compile(name_pattern)
    return [entry for entry in root.iterdir() if pattern.match(entry.name)]


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        # Some attributes exist but refuse reads (e.g. ENODATA while charging).
        _logger.debug("Cannot read %s: %s", path, exc)
        return None


def _attribute_files(device: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    for name in POWER_SUPPLY_ATTRIBUTES:
        path = device / name
        if not path.is_file():
            continue
        text = _read_text(path)
        if text is not None:
            values[name] = text
    return values


def read_battery_values(device: str | Path) -> dict[str, str] | None:
    """Attribute map for one device directory.

    ``None`` when the device's ``uevent`` file says it is not a power
    supply. Without a ``uevent`` file the individual attribute files form
    the map on their own.
    """
    device = Path(device)
    files = _attribute_files(device)
    uevent_path = device / UEVENT_FILE
    if not uevent_path.is_file():
        return files
    text = _read_text(uevent_path)
    if text is None:
        return files
    values = power_supply_values(parse_uevent(text.splitlines()), files)
    if values is None:
        _logger.debug("Skipping %s: not a power supply", device)
    return values


def read_all_battery_values(
    root: str | Path = POWER_SUPPLY_DIR,
    name_pattern: str = BATTERY_NAME_PATTERN,
) -> list[dict[str, str]]:
    result = []
    for device in battery_directories(root, name_pattern):
        values = read_battery_values(device)
        if values is not None:
            result.append(values)
    _logger.debug("Read %d battery devices from %s", len(result), root)
    return result


async def read_all_battery_values_async(
    root: str | Path = POWER_SUPPLY_DIR,
    name_pattern: str = BATTERY_NAME_PATTERN,
) -> list[dict[str, str]]:
    """Like :func:`read_all_battery_values`, reading devices concurrently.

    Results keep the directory listing order.
    """
    devices = await asyncio.to_thread(battery_directories, root, name_pattern)
    results = await asyncio.gather(*(asyncio.to_thread(read_battery_values, device) for device in devices))
    values = [item for item in results if item is not None]
    _logger.debug("Read %d battery devices from %s", len(values), root)
    return values
