"""Linux power-supply attribute maps.

A battery directory exposes its telemetry both as one aggregated
``uevent`` file (``POWER_SUPPLY_ENERGY_NOW=...`` lines) and as one file
per attribute. These helpers fold both into a single lower-case
``{attribute: text}`` map.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping

from pycello._constants import UEVENT_DEVTYPE, UEVENT_PREFIX
from pycello.exceptions import CelloFormatError

_logger = logging.getLogger(__name__)

_UEVENT_LINE_RE = re.compile(r"^\s*(?P<key>\w+)\s*=\s*(?P<value>.*)$")


def parse_uevent(lines: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines; a repeated key keeps its last value."""
    result: dict[str, str] = {}
    for index, raw_line in enumerate(lines):
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            continue
        match = _UEVENT_LINE_RE.match(line)
        if match is None:
            raise CelloFormatError(
                f"Unexpected line format in uevent (line {index}): {line!r}",
                line_number=index,
                line=line,
            )
        result[match.group("key")] = match.group("value")
    return result


def power_supply_values(
    uevent: Mapping[str, str],
    fallback: Mapping[str, str] | None = None,
) -> dict[str, str] | None:
    """Attribute map for one device from its parsed ``uevent`` file.

    Returns ``None`` when the file does not describe a power supply.
    ``POWER_SUPPLY_`` prefixes are stripped regardless of case and keys are
    lower-cased. Values from *fallback* (individual attribute files) only
    fill keys the ``uevent`` file does not carry.
    """
    devtype = uevent.get("DEVTYPE")
    if devtype != UEVENT_DEVTYPE:
        _logger.debug("Skipping uevent with DEVTYPE=%r", devtype)
        return None

    prefix_len = len(UEVENT_PREFIX)
    values: dict[str, str] = {}
    for key, value in uevent.items():
        if key[:prefix_len].upper() == UEVENT_PREFIX:
            values[key[prefix_len:].lower()] = value
    for key, value in (fallback or {}).items():
        values.setdefault(key, value)
    return values
