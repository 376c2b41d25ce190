"""Filesystem locations used by the controller."""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PACKAGE_ROOT / "config.txt"

_xdg_config = os.environ.get("XDG_CONFIG_HOME")
USER_CONFIG_DIR = (Path(_xdg_config) if _xdg_config else Path.home() / ".config") / "thermo-reader"
USER_CONFIG_OVERRIDES_DIR = USER_CONFIG_DIR / "overrides"

W1_DEVICES_DIR = Path("/sys/bus/w1/devices")

__all__ = [
    "PACKAGE_ROOT",
    "DEFAULT_CONFIG_PATH",
    "USER_CONFIG_DIR",
    "USER_CONFIG_OVERRIDES_DIR",
    "W1_DEVICES_DIR",
]
