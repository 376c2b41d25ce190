"""Idle / Active / Warning state machine driving the character display.

State transitions:
- IDLE -> ACTIVE: the idle distance check sees a finite distance strictly
  below the distance threshold. The display is powered on and the first
  dwell sub-tick is sampled straight away.
- ACTIVE <-> WARNING: every dwell sub-tick compares the temperature with
  its threshold. Leaving WARNING clears the advisory rows once.
- ACTIVE/WARNING -> IDLE: the dwell period has elapsed, or (proximity
  policy only) a sub-tick sees the distance at or beyond the threshold.
  The display is cleared and powered off.

Sensor and actuator failures never leave :meth:`ModeController.tick`; they
are logged, the fixed error line is shown and the next tick proceeds on the
normal cadence.
"""

from __future__ import annotations

import asyncio
import math
import time
from typing import Callable, Optional

from thermo_reader.core.logging_utils import get_module_logger
from thermo_reader.hardware.ports import DisplayPort, SensorPort

from .display import DisplayWriter, FrameRenderer
from .errors import ActuatorError, SensorError
from .parameter_store import ParameterStore
from .types import ExitPolicy, Mode, Reading, Thresholds, is_near

logger = get_module_logger("ModeController")

Clock = Callable[[], float]


class ModeController:
    """Samples both sensors and renders the resulting mode on the display."""

    def __init__(
        self,
        sensors: SensorPort,
        display: DisplayPort,
        store: ParameterStore,
        *,
        renderer: Optional[FrameRenderer] = None,
        tick_interval_s: float = 1.0,
        dwell_s: float = 7.0,
        dwell_interval_s: float = 1.0,
        exit_policy: ExitPolicy = ExitPolicy.DWELL,
        clock: Clock = time.monotonic,
    ) -> None:
        self._sensors = sensors
        self._store = store
        self._renderer = renderer or FrameRenderer()
        self._writer = DisplayWriter(display, cols=self._renderer.cols, rows=self._renderer.rows)
        self.tick_interval_s = tick_interval_s
        self.dwell_s = dwell_s
        self.dwell_interval_s = dwell_interval_s
        self.exit_policy = exit_policy
        self._clock = clock

        self._mode = Mode.IDLE
        self._active_since: Optional[float] = None
        self._reading = Reading()
        self.tick_count = 0
        self.error_count = 0

        store.publish_mode(self._mode.value)

    # ------------------------------------------------------------------
    # Introspection

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def writer(self) -> DisplayWriter:
        return self._writer

    @property
    def reading(self) -> Reading:
        return self._reading

    # ------------------------------------------------------------------
    # Loop

    async def run(self) -> None:
        """Tick until cancelled."""
        logger.info(
            "Mode controller started (tick=%.2fs dwell=%.1fs/%.2fs policy=%s)",
            self.tick_interval_s,
            self.dwell_s,
            self.dwell_interval_s,
            self.exit_policy.value,
        )
        await self.show_boot_frame()
        while True:
            delay = await self.tick()
            await asyncio.sleep(delay)

    async def tick(self) -> float:
        """Run one iteration; return the delay before the next one."""

        self.tick_count += 1
        thresholds = self._store.get_thresholds()

        try:
            if self._mode is Mode.IDLE:
                return await self._idle_tick(thresholds)
            return await self._active_tick(thresholds)
        except SensorError as exc:
            self.error_count += 1
            logger.warning("Sensor read failed in %s: %s", self._mode.value, exc)
            await self._show_error()
        except ActuatorError as exc:
            self.error_count += 1
            logger.error("Display write failed in %s: %s", self._mode.value, exc)
            self._writer.invalidate()

        return self.dwell_interval_s if self._mode is not Mode.IDLE else self.tick_interval_s

    async def show_boot_frame(self) -> None:
        """Light the display with the startup banner until the first idle tick."""
        try:
            await self._writer.power_on()
            await self._writer.show(self._renderer.boot_frame())
        except ActuatorError as exc:
            logger.error("Could not show startup banner: %s", exc)

    async def shutdown(self) -> None:
        """Blank and power off the display; always attempted on exit."""
        try:
            await self._writer.power_off()
        finally:
            self._set_mode(Mode.IDLE)
            self._active_since = None

    # ------------------------------------------------------------------
    # Tick bodies

    async def _idle_tick(self, thresholds: Thresholds) -> float:
        distance = await self._sensors.read_distance()
        self._publish(distance_cm=distance)

        if not is_near(distance, thresholds.distance_cm):
            if self._writer.powered:
                await self._writer.power_off()
            return self.tick_interval_s

        logger.info("Presence at %.1fcm (< %.1fcm): activating", distance, thresholds.distance_cm)
        self._set_mode(Mode.ACTIVE)
        self._active_since = self._clock()
        await self._writer.power_on()
        return await self._active_tick(thresholds, entering=True)

    async def _active_tick(self, thresholds: Thresholds, *, entering: bool = False) -> float:
        if not entering and self._dwell_expired():
            await self._enter_idle("dwell period elapsed")
            return self.tick_interval_s

        if not self._writer.powered:
            await self._writer.power_on()

        temperature = await self._sensors.read_temperature()
        distance = await self._sensors.read_distance()
        self._publish(temperature_c=temperature, distance_cm=distance)

        if self.exit_policy is ExitPolicy.PROXIMITY and not is_near(distance, thresholds.distance_cm):
            await self._enter_idle(f"distance {self._format_distance(distance)} at or beyond threshold")
            return self.tick_interval_s

        if temperature > thresholds.temperature_c:
            if self._mode is not Mode.WARNING:
                logger.warning(
                    "Temperature %.2fC above threshold %.1fC",
                    temperature,
                    thresholds.temperature_c,
                )
                self._set_mode(Mode.WARNING)
        elif self._mode is Mode.WARNING:
            logger.info("Temperature %.2fC back under threshold %.1fC", temperature, thresholds.temperature_c)
            self._set_mode(Mode.ACTIVE)
            await self._writer.clear()

        await self._writer.show(self._renderer.render(self._mode, self._reading, thresholds))
        return self.dwell_interval_s

    # ------------------------------------------------------------------
    # Helpers

    def _dwell_expired(self) -> bool:
        if self._active_since is None:
            return True
        return self._clock() - self._active_since >= self.dwell_s

    async def _enter_idle(self, reason: str) -> None:
        logger.info("Returning to idle: %s", reason)
        self._set_mode(Mode.IDLE)
        self._active_since = None
        await self._writer.power_off()

    def _set_mode(self, mode: Mode) -> None:
        if mode is self._mode:
            return
        logger.debug("Mode %s -> %s", self._mode.value, mode.value)
        self._mode = mode
        self._store.publish_mode(mode.value)

    def _publish(self, *, temperature_c: Optional[float] = None, distance_cm: Optional[float] = None) -> None:
        self._reading = self._reading.merge(temperature_c=temperature_c, distance_cm=distance_cm)
        self._store.publish_reading(self._reading)

    async def _show_error(self) -> None:
        if not self._writer.powered:
            return
        try:
            await self._writer.show(self._renderer.error_frame())
        except ActuatorError as exc:
            logger.error("Could not render error line: %s", exc)

    @staticmethod
    def _format_distance(distance: float) -> str:
        return "infinite" if math.isinf(distance) else f"{distance:.1f}cm"


__all__ = ["ModeController"]
