"""Error taxonomy shared by the ports and the control loops."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class SensorFault(Enum):
    UNAVAILABLE = "unavailable"
    PARSE_ERROR = "parse_error"
    TIMEOUT = "timeout"


class ActuatorFault(Enum):
    IO_FAILURE = "io_failure"


class ThermoReaderError(Exception):
    """Base class for controller errors."""


class SensorError(ThermoReaderError):
    """A single sensor read failed; the next tick may succeed."""

    def __init__(self, reason: SensorFault, message: str = "", *, sensor: Optional[str] = None) -> None:
        self.reason = reason
        self.sensor = sensor
        detail = message or reason.value
        super().__init__(f"{sensor}: {detail}" if sensor else detail)


class ActuatorError(ThermoReaderError):
    """An output device rejected a write."""

    def __init__(self, message: str = "", *, device: Optional[str] = None,
                 reason: ActuatorFault = ActuatorFault.IO_FAILURE) -> None:
        self.reason = reason
        self.device = device
        detail = message or reason.value
        super().__init__(f"{device}: {detail}" if device else detail)


class HardwareUnavailableError(ThermoReaderError):
    """Sensor or actuator resources could not be acquired at startup."""


__all__ = [
    "ActuatorError",
    "ActuatorFault",
    "HardwareUnavailableError",
    "SensorError",
    "SensorFault",
    "ThermoReaderError",
]
