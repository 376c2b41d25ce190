"""Stand-in ports for running the controller without a Pi (``--simulate``)."""

from __future__ import annotations

import random
from typing import Optional

from thermo_reader.control.types import DISPLAY_COLS, DISPLAY_ROWS, MAX_DISTANCE_CM
from thermo_reader.core.logging_utils import get_module_logger

from .ports import AlarmPort, DisplayPort, SensorPort

logger = get_module_logger("Simulator")


class SimulatedSensorPort(SensorPort):
    """Random walk around configured base values.

    Distance occasionally jumps out of range so the controller also sees the
    idle path and the infinite sentinel.
    """

    def __init__(
        self,
        *,
        base_temperature_c: float = 18.0,
        base_distance_cm: float = 90.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._base_temperature = base_temperature_c
        self._base_distance = base_distance_cm
        self._temperature = base_temperature_c
        self._distance = base_distance_cm

    async def read_temperature(self) -> float:
        drift = self._rng.uniform(-0.5, 0.5)
        # Pull back toward the base so the walk stays bounded.
        self._temperature += drift + (self._base_temperature - self._temperature) * 0.1
        return round(self._temperature, 3)

    async def read_distance(self) -> float:
        if self._rng.random() < 0.1:
            return float("inf")
        self._distance += self._rng.uniform(-15.0, 15.0) + (self._base_distance - self._distance) * 0.2
        self._distance = max(2.0, min(self._distance, MAX_DISTANCE_CM))
        return round(self._distance, 1)


class SimulatedDisplay(DisplayPort):
    """Keeps the glass contents in memory and logs every change."""

    def __init__(self, *, cols: int = DISPLAY_COLS, rows: int = DISPLAY_ROWS) -> None:
        self.cols = cols
        self.lines = [" " * cols for _ in range(rows)]
        self.blink = False
        self.powered = False

    async def clear(self) -> None:
        self.lines = [" " * self.cols for _ in self.lines]
        logger.debug("LCD clear")

    async def write_line(self, row: int, text: str) -> None:
        self.lines[row] = text[: self.cols].ljust(self.cols)
        logger.info("LCD[%d] %r", row, self.lines[row])

    async def set_blink(self, enabled: bool) -> None:
        self.blink = enabled
        logger.debug("LCD blink %s", "on" if enabled else "off")

    async def set_power(self, on: bool) -> None:
        self.powered = on
        logger.info("LCD power %s", "on" if on else "off")


class SimulatedAlarm(AlarmPort):
    def __init__(self) -> None:
        self.level = False
        self.pulses = 0

    def set_level(self, on: bool) -> None:
        if on and not self.level:
            self.pulses += 1
            logger.debug("Buzzer pulse #%d", self.pulses)
        self.level = on


__all__ = ["SimulatedAlarm", "SimulatedDisplay", "SimulatedSensorPort"]
