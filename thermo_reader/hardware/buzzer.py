"""Piezo buzzer on a GPIO output."""

from __future__ import annotations

from typing import Any

from thermo_reader.control.errors import ActuatorError, HardwareUnavailableError
from thermo_reader.core.logging_utils import get_module_logger

from .hcsr04 import GPIO
from .ports import AlarmPort

logger = get_module_logger("Buzzer")

DEVICE_NAME = "buzzer"


class GPIOBuzzer(AlarmPort):
    """Drives one pin; ``active_low`` for modules that sound on a low level."""

    def __init__(self, pin: int, *, active_low: bool = False, gpio: Any = None) -> None:
        self.pin = pin
        self.active_low = active_low
        self._gpio = gpio if gpio is not None else GPIO
        if self._gpio is None:
            raise HardwareUnavailableError("RPi.GPIO is not available")
        self._level = False

        gpio_mod = self._gpio
        try:
            gpio_mod.setup(pin, gpio_mod.OUT, initial=self._pin_value(False))
        except RuntimeError as exc:
            raise HardwareUnavailableError(f"buzzer pin {pin}: {exc}") from exc
        logger.info("Buzzer ready on pin %d%s", pin, " (active low)" if active_low else "")

    @property
    def level(self) -> bool:
        return self._level

    def _pin_value(self, on: bool) -> int:
        gpio = self._gpio
        return gpio.LOW if on == self.active_low else gpio.HIGH

    def set_level(self, on: bool) -> None:
        try:
            self._gpio.output(self.pin, self._pin_value(on))
        except RuntimeError as exc:
            raise ActuatorError(str(exc), device=DEVICE_NAME) from exc
        self._level = on

    def close(self) -> None:
        self.set_level(False)
        self._gpio.cleanup(self.pin)


__all__ = ["GPIOBuzzer"]
