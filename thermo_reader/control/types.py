"""Value types flowing between the sensors, the store and the loops."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Sequence

# Echo ranging beyond this is reported as INFINITE_DISTANCE.
MAX_DISTANCE_CM = 300.0
INFINITE_DISTANCE = math.inf
INFINITE_LABEL = "infinite"

TEMPERATURE_BOUNDS = (0.0, 30.0)
DISTANCE_BOUNDS = (0.0, 250.0)

DISPLAY_COLS = 20
DISPLAY_ROWS = 4


class Mode(Enum):
    IDLE = "idle"        # nobody near, display off
    ACTIVE = "active"    # someone near, temperature shown
    WARNING = "warning"  # active and over threshold, blinking advisory


class ExitPolicy(Enum):
    """When the controller drops from ACTIVE back to IDLE."""

    DWELL = "dwell"          # only once the dwell period has elapsed
    PROXIMITY = "proximity"  # also as soon as a sub-tick sees a far distance


def is_near(distance_cm: Optional[float], threshold_cm: float) -> bool:
    """True when a distance is a finite number strictly below the threshold."""
    if distance_cm is None or math.isinf(distance_cm):
        return False
    return distance_cm < threshold_cm


def distance_to_json(distance_cm: Optional[float]) -> Any:
    if distance_cm is None:
        return None
    if math.isinf(distance_cm):
        return INFINITE_LABEL
    return round(distance_cm, 1)


@dataclass(frozen=True, slots=True)
class Reading:
    temperature_c: Optional[float] = None
    distance_cm: Optional[float] = None
    timestamp: float = field(default_factory=time.time)

    def merge(
        self,
        *,
        temperature_c: Optional[float] = None,
        distance_cm: Optional[float] = None,
        timestamp: Optional[float] = None,
    ) -> "Reading":
        """Return a new reading carrying over whatever was not re-sampled."""
        return replace(
            self,
            temperature_c=self.temperature_c if temperature_c is None else temperature_c,
            distance_cm=self.distance_cm if distance_cm is None else distance_cm,
            timestamp=time.time() if timestamp is None else timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "temperature": None if self.temperature_c is None else round(self.temperature_c, 3),
            "distance": distance_to_json(self.distance_cm),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class Thresholds:
    temperature_c: float = 15.0
    distance_cm: float = 120.0
    alarm_enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "temperatureThreshold": self.temperature_c,
            "distanceThreshold": self.distance_cm,
            "alarmEnabled": self.alarm_enabled,
        }


def _fit(text: str, width: int) -> str:
    return text[:width].ljust(width)


@dataclass(frozen=True, slots=True)
class DisplayFrame:
    """What the LCD should show: one fixed-width string per row plus blink."""

    lines: tuple[str, ...]
    blink: bool = False

    @classmethod
    def build(cls, lines: Sequence[str], *, blink: bool = False,
              cols: int = DISPLAY_COLS, rows: int = DISPLAY_ROWS) -> "DisplayFrame":
        padded = [_fit(text, cols) for text in list(lines)[:rows]]
        padded.extend(" " * cols for _ in range(rows - len(padded)))
        return cls(lines=tuple(padded), blink=blink)

    @classmethod
    def blank(cls, *, cols: int = DISPLAY_COLS, rows: int = DISPLAY_ROWS) -> "DisplayFrame":
        return cls.build((), cols=cols, rows=rows)


@dataclass(slots=True)
class AlarmState:
    active: bool = False
    trains_started: int = 0
    pulses_emitted: int = 0


__all__ = [
    "AlarmState",
    "DISPLAY_COLS",
    "DISPLAY_ROWS",
    "DISTANCE_BOUNDS",
    "DisplayFrame",
    "ExitPolicy",
    "INFINITE_DISTANCE",
    "INFINITE_LABEL",
    "MAX_DISTANCE_CM",
    "Mode",
    "Reading",
    "TEMPERATURE_BOUNDS",
    "Thresholds",
    "distance_to_json",
    "is_near",
]
