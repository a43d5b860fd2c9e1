"""Runtime configuration for pycello."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pycello._constants import BATTERY_NAME_PATTERN, IOREG_BATTERY_CLASS, IOREG_COMMAND, POWER_SUPPLY_DIR


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class CelloConfig:
    """Where and how system batteries are read.

    Parameters
    ----------
    ioreg_command : str
        Registry dump command run on macOS.
    ioreg_class : str
        Registry object class holding battery properties.
    power_supply_dir : str
        Linux power-supply class directory.
    battery_name_pattern : str
        Regular expression matched against device directory names under
        ``power_supply_dir``.
    strict_attributes : bool
        Raise on Linux attribute text that cannot be coerced instead of
        dropping it.
    """

    ioreg_command: str = IOREG_COMMAND
    ioreg_class: str = IOREG_BATTERY_CLASS
    power_supply_dir: str = POWER_SUPPLY_DIR
    battery_name_pattern: str = BATTERY_NAME_PATTERN
    strict_attributes: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> CelloConfig:
        """Create configuration from ``CELLO_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CELLO_IOREG_COMMAND": "ioreg_command",
            "CELLO_IOREG_CLASS": "ioreg_class",
            "CELLO_POWER_SUPPLY_DIR": "power_supply_dir",
            "CELLO_BATTERY_PATTERN": "battery_name_pattern",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        if "strict_attributes" not in overrides:
            config_kwargs["strict_attributes"] = _env_bool(env.get("CELLO_STRICT_ATTRIBUTES"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
