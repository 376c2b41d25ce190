"""Buzzer sequencing driven purely by the ParameterStore."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

from thermo_reader.core.asyncio_utils import create_logged_task
from thermo_reader.core.logging_utils import get_module_logger
from thermo_reader.hardware.ports import AlarmPort

from .errors import ActuatorError
from .parameter_store import ParameterStore
from .types import AlarmState

logger = get_module_logger("AlarmScheduler")


class AlarmScheduler:
    """Pulses the buzzer while the temperature is over threshold and alarms are enabled.

    The scheduler ticks every ``interval_s``. On the rising edge it starts a
    pulse train task (``pulse_on_s`` on every ``pulse_period_s``) which
    re-checks the condition before each pulse. On the falling edge the train
    is cancelled and the buzzer forced off, so a cleared condition silences
    the buzzer within one period even mid-train.
    """

    def __init__(
        self,
        alarm: AlarmPort,
        store: ParameterStore,
        *,
        interval_s: float = 0.1,
        pulse_on_s: float = 0.05,
        pulse_period_s: float = 0.1,
    ) -> None:
        if pulse_on_s >= pulse_period_s:
            raise ValueError("pulse_on_s must be shorter than pulse_period_s")
        self._alarm = alarm
        self._store = store
        self.interval_s = interval_s
        self.pulse_on_s = pulse_on_s
        self.pulse_period_s = pulse_period_s
        self.state = AlarmState()
        self._train: Optional[asyncio.Task] = None

    @property
    def pulsing(self) -> bool:
        return self._train is not None and not self._train.done()

    def should_be_active(self) -> bool:
        thresholds = self._store.get_thresholds()
        if not thresholds.alarm_enabled:
            return False
        temperature = self._store.latest_temperature()
        return temperature is not None and temperature > thresholds.temperature_c

    async def run(self) -> None:
        logger.info(
            "Alarm scheduler started (tick=%.0fms pulse=%.0f/%.0fms)",
            self.interval_s * 1000,
            self.pulse_on_s * 1000,
            self.pulse_period_s * 1000,
        )
        while True:
            await self.tick()
            await asyncio.sleep(self.interval_s)

    async def tick(self) -> bool:
        active = self.should_be_active()

        if active:
            if not self.state.active:
                logger.warning("Alarm raised")
                self.state.active = True
                self.state.trains_started += 1
            if not self.pulsing:
                self._train = create_logged_task(
                    self._pulse_train(),
                    logger=logger,
                    context="alarm-pulse-train",
                )
        elif self.state.active:
            logger.info("Alarm cleared")
            self.state.active = False
            await self._stop_train()
            self._drive(False)

        return active

    async def shutdown(self) -> None:
        """Stop any pulse train and leave the buzzer off."""
        await self._stop_train()
        self.state.active = False
        self._alarm.set_level(False)

    # ------------------------------------------------------------------
    # Internals

    async def _pulse_train(self) -> None:
        try:
            while self.should_be_active():
                self._drive(True)
                await asyncio.sleep(self.pulse_on_s)
                self._drive(False)
                self.state.pulses_emitted += 1
                await asyncio.sleep(self.pulse_period_s - self.pulse_on_s)
        finally:
            self._drive(False)

    async def _stop_train(self) -> None:
        train, self._train = self._train, None
        if train is None or train.done():
            return
        train.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await train

    def _drive(self, on: bool) -> None:
        try:
            self._alarm.set_level(on)
        except ActuatorError as exc:
            logger.error("Buzzer write failed: %s", exc)


__all__ = ["AlarmScheduler"]
