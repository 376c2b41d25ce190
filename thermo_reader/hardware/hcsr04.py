"""HC-SR04 echo ranging over RPi.GPIO."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable

try:
    import RPi.GPIO as GPIO
    GPIO_AVAILABLE = True
except (ImportError, RuntimeError):
    GPIO = None
    GPIO_AVAILABLE = False

from thermo_reader.control.errors import HardwareUnavailableError, SensorError, SensorFault
from thermo_reader.control.types import INFINITE_DISTANCE, MAX_DISTANCE_CM
from thermo_reader.core.logging_utils import get_module_logger

logger = get_module_logger("HCSR04")

SENSOR_NAME = "hcsr04"

# Round trip at roughly 343 m/s: one centimetre of range per 58 us of echo.
US_PER_CM = 58.0
TRIGGER_SETTLE_S = 2e-6
TRIGGER_PULSE_S = 10e-6


def echo_to_distance(elapsed_s: float) -> float:
    """Convert an echo pulse width to centimetres, ``inf`` beyond range."""
    distance = (elapsed_s * 1_000_000.0) / US_PER_CM
    if distance > MAX_DISTANCE_CM:
        return INFINITE_DISTANCE
    return distance


class HCSR04Ranger:
    """One trigger/echo cycle per :meth:`read`.

    The timing loop busy-waits on the echo pin, so :meth:`read` hands it to a
    worker thread. ``gpio``, ``clock`` and ``sleep`` are injectable for tests.
    """

    def __init__(
        self,
        trigger_pin: int,
        echo_pin: int,
        *,
        timeout_s: float = 0.03,
        gpio: Any = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.trigger_pin = trigger_pin
        self.echo_pin = echo_pin
        self.timeout_s = timeout_s
        self._gpio = gpio if gpio is not None else GPIO
        self._clock = clock
        self._sleep = sleep
        self._configured = False

        if self._gpio is None:
            raise HardwareUnavailableError("RPi.GPIO is not available")

    def setup(self) -> None:
        gpio = self._gpio
        gpio.setup(self.trigger_pin, gpio.OUT, initial=gpio.LOW)
        gpio.setup(self.echo_pin, gpio.IN, pull_up_down=gpio.PUD_DOWN)
        self._configured = True
        logger.info("Ranger ready (trigger=%d echo=%d)", self.trigger_pin, self.echo_pin)

    async def read(self) -> float:
        return await asyncio.to_thread(self.measure)

    def measure(self) -> float:
        """Blocking trigger/echo cycle; returns centimetres."""

        try:
            if not self._configured:
                self.setup()
            return self._cycle()
        except RuntimeError as exc:
            raise SensorError(SensorFault.UNAVAILABLE, str(exc), sensor=SENSOR_NAME) from exc

    def _cycle(self) -> float:
        gpio = self._gpio
        gpio.output(self.trigger_pin, gpio.LOW)
        self._sleep(TRIGGER_SETTLE_S)
        gpio.output(self.trigger_pin, gpio.HIGH)
        self._sleep(TRIGGER_PULSE_S)
        gpio.output(self.trigger_pin, gpio.LOW)

        waited_from = self._clock()
        while gpio.input(self.echo_pin) == gpio.LOW:
            if self._clock() - waited_from > self.timeout_s:
                raise SensorError(SensorFault.TIMEOUT, "no echo", sensor=SENSOR_NAME)

        start = self._clock()
        # Past this the target is out of range; no need to wait for the edge.
        max_echo_s = MAX_DISTANCE_CM * US_PER_CM / 1_000_000.0
        while gpio.input(self.echo_pin) == gpio.HIGH:
            now = self._clock()
            if now - start > max_echo_s:
                return INFINITE_DISTANCE
        end = self._clock()

        return echo_to_distance(end - start)

    def close(self) -> None:
        if self._configured:
            self._gpio.cleanup((self.trigger_pin, self.echo_pin))
            self._configured = False


__all__ = ["GPIO_AVAILABLE", "HCSR04Ranger", "echo_to_distance"]
