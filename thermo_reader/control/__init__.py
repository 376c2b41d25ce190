"""Control loops and the state they share."""

from .alarm_scheduler import AlarmScheduler
from .errors import ActuatorError, HardwareUnavailableError, SensorError, SensorFault
from .mode_controller import ModeController
from .parameter_store import ParameterStore
from .types import ExitPolicy, Mode, Reading, Thresholds

__all__ = [
    "ActuatorError",
    "AlarmScheduler",
    "ExitPolicy",
    "HardwareUnavailableError",
    "Mode",
    "ModeController",
    "ParameterStore",
    "Reading",
    "SensorError",
    "SensorFault",
    "Thresholds",
]
