"""Frame rendering and debounced writes to the character display."""

from __future__ import annotations

from typing import Optional, Sequence

from thermo_reader.core.logging_utils import get_module_logger
from thermo_reader.hardware.ports import DisplayPort

from .config import DEFAULT_ADVISORY, DEFAULT_ERROR_TEXT
from .errors import ActuatorError
from .types import DISPLAY_COLS, DISPLAY_ROWS, DisplayFrame, Mode, Reading, Thresholds

logger = get_module_logger("Display")

BOOT_TEXT = "Starting..."


class FrameRenderer:
    """Pure mapping from (mode, reading, thresholds) to a DisplayFrame."""

    def __init__(
        self,
        *,
        cols: int = DISPLAY_COLS,
        rows: int = DISPLAY_ROWS,
        advisory_lines: Sequence[str] = DEFAULT_ADVISORY,
        error_text: str = DEFAULT_ERROR_TEXT,
    ) -> None:
        self.cols = cols
        self.rows = rows
        self.advisory_lines = tuple(advisory_lines)[: max(rows - 1, 0)]
        self.error_text = error_text

    @staticmethod
    def temperature_line(temperature_c: float) -> str:
        return f"Temp: {temperature_c:.1f}C"

    def blank(self) -> DisplayFrame:
        return DisplayFrame.blank(cols=self.cols, rows=self.rows)

    def boot_frame(self) -> DisplayFrame:
        return DisplayFrame.build([BOOT_TEXT], cols=self.cols, rows=self.rows)

    def error_frame(self) -> DisplayFrame:
        return DisplayFrame.build([self.error_text], cols=self.cols, rows=self.rows)

    def render(self, mode: Mode, reading: Optional[Reading], thresholds: Thresholds) -> DisplayFrame:
        if mode is Mode.IDLE or reading is None or reading.temperature_c is None:
            return self.blank()

        line = self.temperature_line(reading.temperature_c)
        if mode is Mode.WARNING:
            return DisplayFrame.build([line, *self.advisory_lines], blink=True, cols=self.cols, rows=self.rows)
        return DisplayFrame.build([line], cols=self.cols, rows=self.rows)


class DisplayWriter:
    """Sends frames to a DisplayPort, skipping rows already on the glass.

    The cache mirrors what was last written successfully. Any failed write
    drops the cache so the next frame is written in full.
    """

    def __init__(self, port: DisplayPort, *, cols: int = DISPLAY_COLS, rows: int = DISPLAY_ROWS) -> None:
        self._port = port
        self._cols = cols
        self._rows = rows
        self._lines: Optional[tuple[str, ...]] = None
        self._blink: Optional[bool] = None
        self._powered = False
        self.line_writes = 0
        self.clears = 0

    @property
    def powered(self) -> bool:
        return self._powered

    @property
    def last_frame(self) -> Optional[DisplayFrame]:
        if self._lines is None or self._blink is None:
            return None
        return DisplayFrame(lines=self._lines, blink=self._blink)

    def invalidate(self) -> None:
        self._lines = None
        self._blink = None

    async def power_on(self) -> None:
        try:
            await self._port.set_power(True)
            self._powered = True
            await self.clear()
        except ActuatorError:
            self.invalidate()
            raise

    async def power_off(self) -> None:
        try:
            await self.clear()
            await self._port.set_blink(False)
            self._blink = False
            await self._port.set_power(False)
        except ActuatorError:
            self.invalidate()
            raise
        finally:
            self._powered = False

    async def clear(self) -> None:
        try:
            await self._port.clear()
        except ActuatorError:
            self.invalidate()
            raise
        self.clears += 1
        self._lines = DisplayFrame.blank(cols=self._cols, rows=self._rows).lines

    async def show(self, frame: DisplayFrame) -> bool:
        """Write whatever differs from the cached frame; False when nothing did."""

        if frame.lines == self._lines and frame.blink == self._blink:
            return False

        try:
            if frame.blink != self._blink:
                await self._port.set_blink(frame.blink)
                self._blink = frame.blink
            for row, text in enumerate(frame.lines):
                if self._lines is not None and self._lines[row] == text:
                    continue
                await self._port.write_line(row, text)
                self.line_writes += 1
        except ActuatorError:
            self.invalidate()
            raise

        self._lines = frame.lines
        return True


__all__ = ["BOOT_TEXT", "DisplayWriter", "FrameRenderer"]
