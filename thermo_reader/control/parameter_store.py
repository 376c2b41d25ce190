"""Shared holder for thresholds and the last published reading.

Both control loops and the REST adapter go through this object. The lock is
held only while swapping a reference, never across I/O or an ``await``, so
the 100 ms alarm cadence cannot be stalled by the slower display loop.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Callable, Optional

from thermo_reader.core.logging_utils import get_module_logger

from .types import DISTANCE_BOUNDS, TEMPERATURE_BOUNDS, Reading, Thresholds

ThresholdsCallback = Callable[[Thresholds, Thresholds], None]

logger = get_module_logger("ParameterStore")


def clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, float(value)))


class ParameterStore:
    """Thread-safe thresholds + latest reading, with change observers."""

    def __init__(self, thresholds: Optional[Thresholds] = None) -> None:
        self._lock = threading.Lock()
        self._thresholds = self._clamped(thresholds or Thresholds())
        self._reading: Optional[Reading] = None
        self._mode: Optional[str] = None
        self._observers: list[ThresholdsCallback] = []

    @staticmethod
    def _clamped(thresholds: Thresholds) -> Thresholds:
        return replace(
            thresholds,
            temperature_c=clamp(thresholds.temperature_c, TEMPERATURE_BOUNDS),
            distance_cm=clamp(thresholds.distance_cm, DISTANCE_BOUNDS),
        )

    # ------------------------------------------------------------------
    # Thresholds

    def get_thresholds(self) -> Thresholds:
        with self._lock:
            return self._thresholds

    def set_thresholds(
        self,
        *,
        temperature_c: Optional[float] = None,
        distance_cm: Optional[float] = None,
        alarm_enabled: Optional[bool] = None,
    ) -> Thresholds:
        """Apply a partial update; out-of-range values are clamped."""

        with self._lock:
            previous = self._thresholds
            updated = previous
            if temperature_c is not None:
                updated = replace(updated, temperature_c=clamp(temperature_c, TEMPERATURE_BOUNDS))
            if distance_cm is not None:
                updated = replace(updated, distance_cm=clamp(distance_cm, DISTANCE_BOUNDS))
            if alarm_enabled is not None:
                updated = replace(updated, alarm_enabled=bool(alarm_enabled))
            self._thresholds = updated
            observers = list(self._observers)

        if updated != previous:
            logger.info(
                "Thresholds updated: temperature=%.1fC distance=%.1fcm alarm=%s",
                updated.temperature_c,
                updated.distance_cm,
                updated.alarm_enabled,
            )
            for callback in observers:
                try:
                    callback(previous, updated)
                except Exception:
                    logger.exception("Threshold observer %r failed", callback)
        return updated

    def subscribe(self, callback: ThresholdsCallback) -> Callable[[], None]:
        """Register ``callback(previous, updated)``; returns an unsubscribe function."""

        with self._lock:
            self._observers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._observers:
                    self._observers.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Readings

    def publish_reading(self, reading: Reading) -> None:
        with self._lock:
            self._reading = reading

    def latest_reading(self) -> Optional[Reading]:
        with self._lock:
            return self._reading

    def latest_temperature(self) -> Optional[float]:
        with self._lock:
            return None if self._reading is None else self._reading.temperature_c

    def publish_mode(self, mode: str) -> None:
        with self._lock:
            self._mode = mode

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of everything the remote side may read."""

        with self._lock:
            thresholds = self._thresholds
            reading = self._reading
            mode = self._mode

        payload: dict[str, Any] = {"temperature": None, "distance": None, "timestamp": None}
        if reading is not None:
            payload.update(reading.to_dict())
        payload.update(thresholds.to_dict())
        payload["mode"] = mode
        return payload


__all__ = ["ParameterStore", "clamp"]
