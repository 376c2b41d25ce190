"""Device ports: interfaces plus RPi, RPLCD and simulated implementations."""

from .ports import AlarmPort, DisplayPort, SensorPort

__all__ = ["AlarmPort", "DisplayPort", "SensorPort"]
