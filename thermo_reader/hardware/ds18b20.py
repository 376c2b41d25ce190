"""DS18B20 reads through the kernel w1-therm driver.

The driver exposes each probe as ``/sys/bus/w1/devices/28-*/w1_slave``::

    72 01 4b 46 7f ff 0e 10 57 : crc=57 YES
    72 01 4b 46 7f ff 0e 10 57 t=23125
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union

import aiofiles

from thermo_reader.control.errors import SensorError, SensorFault
from thermo_reader.core.logging_utils import get_module_logger
from thermo_reader.core.paths import W1_DEVICES_DIR

logger = get_module_logger("DS18B20")

_TEMPERATURE_RE = re.compile(r"t=(-?\d+)")
SENSOR_NAME = "ds18b20"


def discover_device_path(devices_dir: Union[str, Path] = W1_DEVICES_DIR) -> Optional[Path]:
    """Return the first ``28-*/w1_slave`` under ``devices_dir``, if any."""
    candidates = sorted(Path(devices_dir).glob("28-*"))
    for candidate in candidates:
        slave = candidate / "w1_slave"
        if slave.exists():
            return slave
    return None


def parse_w1_payload(payload: str) -> float:
    """Decode a w1_slave payload into degrees Celsius."""

    lines = payload.strip().splitlines()
    if len(lines) < 2:
        raise SensorError(SensorFault.PARSE_ERROR, "truncated payload", sensor=SENSOR_NAME)
    if not lines[0].strip().endswith("YES"):
        raise SensorError(SensorFault.PARSE_ERROR, "CRC check failed", sensor=SENSOR_NAME)

    match = _TEMPERATURE_RE.search(lines[1])
    if match is None:
        raise SensorError(SensorFault.PARSE_ERROR, "no t= field", sensor=SENSOR_NAME)
    return int(match.group(1)) / 1000.0


class DS18B20Reader:
    """Reads one probe; each call opens the device file afresh."""

    def __init__(self, device_path: Union[str, Path]) -> None:
        self.device_path = Path(device_path)

    async def read(self) -> float:
        try:
            async with aiofiles.open(self.device_path, "r", encoding="utf-8") as handle:
                payload = await handle.read()
        except UnicodeDecodeError as exc:
            raise SensorError(SensorFault.PARSE_ERROR, "payload is not text", sensor=SENSOR_NAME) from exc
        except OSError as exc:
            raise SensorError(SensorFault.UNAVAILABLE, str(exc), sensor=SENSOR_NAME) from exc

        temperature = parse_w1_payload(payload)
        logger.debug("Read %.3fC from %s", temperature, self.device_path)
        return temperature


__all__ = ["DS18B20Reader", "discover_device_path", "parse_w1_payload"]
