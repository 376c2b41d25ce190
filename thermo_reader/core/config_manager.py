"""Reading and persisting the ``key = value`` controller config file."""

from __future__ import annotations

import asyncio
import errno
import hashlib
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import aiofiles

from .logging_utils import get_module_logger
from .paths import USER_CONFIG_OVERRIDES_DIR

logger = get_module_logger("ConfigManager")


class ConfigManager:
    """Parses the controller config and writes threshold edits back to it.

    When the config file lives on a read-only mount (a common setup for the
    Pi image) writes land in an override file under the user config dir and
    are layered on top of the base file when reading.
    """

    def __init__(self, overrides_dir: Optional[Path] = None) -> None:
        self._overrides_dir = Path(overrides_dir) if overrides_dir else USER_CONFIG_OVERRIDES_DIR
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _stringify_value(value: Any) -> str:
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    @staticmethod
    def _parse_config_lines(lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()

            if '#' in value:
                value = value.split('#')[0].strip()

            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                value = value[1:-1]

            config[key] = value

        return config

    def _override_path(self, config_path: Path) -> Path:
        digest = hashlib.sha1(str(config_path.resolve()).encode('utf-8')).hexdigest()[:10]
        safe_name = re.sub(r'[^a-zA-Z0-9._-]+', '_', config_path.stem or 'config')
        return self._overrides_dir / f"{safe_name}_{digest}{config_path.suffix or '.txt'}"

    def _load_override(self, config_path: Path) -> Dict[str, str]:
        override_path = self._override_path(config_path)
        if not override_path.exists():
            return {}
        try:
            with open(override_path, 'r', encoding='utf-8') as fh:
                return self._parse_config_lines(fh)
        except OSError as exc:
            logger.warning("Failed to read override config %s: %s", override_path, exc)
            return {}

    def _write_override(self, config_path: Path, updates: Dict[str, Any]) -> bool:
        override_path = self._override_path(config_path)
        try:
            existing = self._load_override(config_path)
            for key, value in updates.items():
                existing[key] = self._stringify_value(value)

            override_path.parent.mkdir(parents=True, exist_ok=True)
            with open(override_path, 'w', encoding='utf-8') as fh:
                for key in sorted(existing):
                    fh.write(f"{key} = {existing[key]}\n")

            logger.debug("Stored config overrides in %s", override_path)
            return True
        except OSError as exc:
            logger.error("Failed to write config override %s: %s", override_path, exc)
            return False

    def _merge_lines(self, lines: list[str], updates: Dict[str, Any]) -> list[str]:
        updated_keys = set()

        for i, line in enumerate(lines):
            stripped = line.strip()
            if not stripped or stripped.startswith('#') or '=' not in stripped:
                continue
            key = stripped.split('=')[0].strip()
            if key in updates:
                indent = len(line) - len(line.lstrip())
                lines[i] = ' ' * indent + f"{key} = {self._stringify_value(updates[key])}\n"
                updated_keys.add(key)

        for key, value in updates.items():
            if key not in updated_keys:
                lines.append(f"{key} = {self._stringify_value(value)}\n")
                logger.debug("Added new config key: %s", key)

        return lines

    # ------------------------------------------------------------------
    # Public API

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Read the config synchronously (startup, before the loop runs)."""
        config: Dict[str, str] = {}

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as fh:
                    config = self._parse_config_lines(fh)
            except OSError as exc:
                logger.error("Failed to read config %s: %s", config_path, exc)

        config.update(self._load_override(config_path))
        return config

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        config: Dict[str, str] = {}

        if await asyncio.to_thread(config_path.exists):
            try:
                async with aiofiles.open(config_path, 'r', encoding='utf-8') as fh:
                    lines = await fh.readlines()
                config = self._parse_config_lines(lines)
            except OSError as exc:
                logger.error("Failed to read config %s: %s", config_path, exc)

        config.update(await asyncio.to_thread(self._load_override, config_path))
        return config

    async def write_config_async(self, config_path: Path, updates: Dict[str, Any]) -> bool:
        """Merge ``updates`` into the config file, falling back to an override."""
        if not updates:
            return True

        async with self._lock:
            if not await asyncio.to_thread(config_path.exists):
                logger.warning("Config file %s missing; storing values as override", config_path)
                return await asyncio.to_thread(self._write_override, config_path, updates)

            try:
                async with aiofiles.open(config_path, 'r', encoding='utf-8') as fh:
                    lines = await fh.readlines()

                lines = self._merge_lines(lines, updates)

                async with aiofiles.open(config_path, 'w', encoding='utf-8') as fh:
                    await fh.writelines(lines)
                return True

            except OSError as exc:
                if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EROFS):
                    logger.warning(
                        "Config %s is not writable (%s). Falling back to override file",
                        config_path,
                        exc,
                    )
                    return await asyncio.to_thread(self._write_override, config_path, updates)
                logger.error("Failed to write config %s: %s", config_path, exc, exc_info=True)
                return False

    # ------------------------------------------------------------------
    # Typed getters

    @staticmethod
    def get_bool(config: Dict[str, Any], key: str, default: bool = False) -> bool:
        if key not in config:
            return default
        value = config[key]
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ('true', '1', 'yes', 'on')

    @staticmethod
    def get_int(config: Dict[str, Any], key: str, default: int = 0) -> int:
        if key not in config:
            return default
        try:
            return int(str(config[key]), 0)
        except ValueError:
            logger.warning("Invalid int value for %s: %s, using default %d", key, config[key], default)
            return default

    @staticmethod
    def get_float(config: Dict[str, Any], key: str, default: float = 0.0) -> float:
        if key not in config:
            return default
        try:
            return float(config[key])
        except ValueError:
            logger.warning("Invalid float value for %s: %s, using default %f", key, config[key], default)
            return default

    @staticmethod
    def get_str(config: Dict[str, Any], key: str, default: str = "") -> str:
        value = config.get(key)
        return default if value is None else str(value)


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager


__all__ = ["ConfigManager", "get_config_manager"]
