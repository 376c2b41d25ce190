"""Wiring of the physical (or simulated) ports from a ControllerConfig."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from thermo_reader.control.config import ControllerConfig
from thermo_reader.control.errors import ActuatorError, HardwareUnavailableError
from thermo_reader.core.logging_utils import get_module_logger

from .buzzer import GPIOBuzzer
from .ds18b20 import DS18B20Reader, discover_device_path
from .hcsr04 import GPIO, HCSR04Ranger
from .lcd import CharLCDDisplay
from .ports import AlarmPort, DisplayPort, SensorPort
from .simulated import SimulatedAlarm, SimulatedDisplay, SimulatedSensorPort

logger = get_module_logger("Board")


class GPIOSensorPort(SensorPort):
    """DS18B20 over 1-Wire plus HC-SR04 over GPIO."""

    def __init__(self, thermometer: DS18B20Reader, ranger: HCSR04Ranger) -> None:
        self.thermometer = thermometer
        self.ranger = ranger

    async def read_temperature(self) -> float:
        return await self.thermometer.read()

    async def read_distance(self) -> float:
        return await self.ranger.read()

    async def close(self) -> None:
        self.ranger.close()


@dataclass(slots=True)
class Ports:
    sensors: SensorPort
    display: DisplayPort
    alarm: AlarmPort
    gpio: Any = None
    simulated: bool = False

    async def release(self) -> None:
        """Buzzer off, display closed, GPIO released; every step is attempted."""

        try:
            self.alarm.close()
        except ActuatorError as exc:
            logger.error("Could not silence buzzer: %s", exc)
        try:
            await self.display.close()
        except ActuatorError as exc:
            logger.error("Could not close display: %s", exc)
        await self.sensors.close()
        if self.gpio is not None:
            self.gpio.cleanup()
            logger.info("GPIO released")


def resolve_w1_path(configured: str) -> Path:
    if configured:
        path = Path(configured)
        if not path.exists():
            raise HardwareUnavailableError(f"DS18B20 path {path} does not exist")
        return path

    discovered = discover_device_path()
    if discovered is None:
        raise HardwareUnavailableError("No DS18B20 found under /sys/bus/w1/devices (is w1-gpio enabled?)")
    return discovered


def build_ports(config: ControllerConfig, *, gpio: Optional[Any] = None) -> Ports:
    """Acquire every device or raise HardwareUnavailableError."""

    if config.simulate:
        logger.info("Using simulated sensors, display and buzzer")
        return Ports(
            sensors=SimulatedSensorPort(
                base_temperature_c=config.sim_temperature_c,
                base_distance_cm=config.sim_distance_cm,
            ),
            display=SimulatedDisplay(cols=config.lcd_cols, rows=config.lcd_rows),
            alarm=SimulatedAlarm(),
            simulated=True,
        )

    gpio = gpio if gpio is not None else GPIO
    if gpio is None:
        raise HardwareUnavailableError("RPi.GPIO is not available; install the 'hardware' extra or use --simulate")

    w1_path = resolve_w1_path(config.w1_device_path)
    logger.info("DS18B20 at %s", w1_path)

    gpio.setwarnings(False)
    gpio.setmode(gpio.BCM)
    try:
        ranger = HCSR04Ranger(
            config.trigger_pin,
            config.echo_pin,
            timeout_s=config.echo_timeout_s,
            gpio=gpio,
        )
        ranger.setup()
        alarm = GPIOBuzzer(config.buzzer_pin, active_low=config.buzzer_active_low, gpio=gpio)
        display = CharLCDDisplay.open(
            expander=config.lcd_expander,
            address=config.lcd_address,
            port=config.lcd_port,
            cols=config.lcd_cols,
            rows=config.lcd_rows,
        )
    except HardwareUnavailableError:
        gpio.cleanup()
        raise

    return Ports(
        sensors=GPIOSensorPort(DS18B20Reader(w1_path), ranger),
        display=display,
        alarm=alarm,
        gpio=gpio,
    )


__all__ = ["GPIOSensorPort", "Ports", "build_ports", "resolve_w1_path"]
