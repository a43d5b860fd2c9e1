#!/usr/bin/env python3
"""Print the state of this machine's batteries.

Usage
-----
::

    python scripts/battery_report.py

Options::

    --details            Also print the raw battery state
    --all                Report every battery, not only the primary one
    --json               Output as machine-readable JSON
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pycello import BatteryInfo, CelloConfig, create_system_snapshot_async  # noqa: E402


def _fmt(value: float | None, unit: str, fmt: str = ".1f") -> str:
    if value is None:
        return "n/a"
    return f"{value:{fmt}}{unit}"


def _fmt_seconds(value: float | None) -> str:
    if value is None:
        return "n/a"
    minutes = int(value // 60)
    return f"{minutes // 60}h{minutes % 60:02d}m"


def _info_lines(info: BatteryInfo) -> list[str]:
    if not info.has_battery:
        return ["  No battery"]
    return [
        f"  Charge:       {_fmt(info.charge_percentage, '%')}",
        f"  Health:       {_fmt(info.charge_health_percentage, '%')}",
        f"  Rate:         {_fmt(info.charge_rate, ' W', '+.2f')}",
        f"  Temperature:  {_fmt(info.temperature, ' C')}",
        f"  Status:       {info.charge_status}",
        f"  To empty:     {_fmt_seconds(info.time_to_discharge_completion)}",
        f"  To full:      {_fmt_seconds(info.time_to_charge_completion)}",
    ]


def _info_json(info: BatteryInfo) -> dict[str, Any]:
    payload = info.model_dump(mode="json")
    payload["charging_flags"] = [flag.name for flag in type(info.charging_flags) if flag in info.charging_flags]
    payload["charge_status"] = str(info.charge_status)
    return payload


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Report the state of this machine's batteries",
    )
    parser.add_argument("--details", action="store_true", help="Also print the raw battery state")
    parser.add_argument("--all", action="store_true", dest="all_batteries", help="Report every battery")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    snapshot = await create_system_snapshot_async(CelloConfig.from_env())
    infos = snapshot.all_infos() if args.all_batteries else [snapshot.primary_info()]

    if args.json_mode:
        payload: dict[str, Any] = {"batteries": [_info_json(info) for info in infos]}
        if args.details:
            payload["details"] = snapshot.details_text()
        print(json.dumps(payload, indent=2))
        return

    out: list[str] = []
    for index, info in enumerate(infos):
        out.append(f"Battery {index}:")
        out.extend(_info_lines(info))
    if args.details:
        out.append("")
        out.append(snapshot.details_text())
    print("\n".join(out))


if __name__ == "__main__":
    asyncio.run(main())
