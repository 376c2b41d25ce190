"""Port interfaces between the control loops and the physical devices.

Implementations raise :class:`SensorError` / :class:`ActuatorError` and never
retry internally; the loops decide what a failure means for the current tick.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class SensorPort(ABC):
    """Temperature and echo-ranging reads, each bounded in time."""

    @abstractmethod
    async def read_temperature(self) -> float:
        """Return degrees Celsius or raise SensorError(UNAVAILABLE | PARSE_ERROR)."""

    @abstractmethod
    async def read_distance(self) -> float:
        """Return centimetres (``math.inf`` beyond range) or raise SensorError(TIMEOUT)."""

    async def close(self) -> None:
        return None


class DisplayPort(ABC):
    """Character display primitives; only the mode controller writes here."""

    @abstractmethod
    async def clear(self) -> None:
        ...

    @abstractmethod
    async def write_line(self, row: int, text: str) -> None:
        """Write ``text`` at column 0 of ``row`` (0-based)."""

    @abstractmethod
    async def set_blink(self, enabled: bool) -> None:
        ...

    @abstractmethod
    async def set_power(self, on: bool) -> None:
        ...

    async def close(self) -> None:
        return None


class AlarmPort(ABC):
    """Binary actuator (buzzer)."""

    @abstractmethod
    def set_level(self, on: bool) -> None:
        """Drive the actuator; must be quick enough to call from the event loop."""

    def close(self) -> None:
        self.set_level(False)


__all__ = ["AlarmPort", "DisplayPort", "SensorPort"]
