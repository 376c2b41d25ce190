"""20x4 HD44780 character LCD behind a PCF8574 I2C backpack (RPLCD)."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

try:
    from RPLCD.i2c import CharLCD
    RPLCD_AVAILABLE = True
except ImportError:
    CharLCD = None
    RPLCD_AVAILABLE = False

from thermo_reader.control.errors import ActuatorError, HardwareUnavailableError
from thermo_reader.core.logging_utils import get_module_logger

from .ports import DisplayPort

logger = get_module_logger("LCD")

DEVICE_NAME = "lcd"


class CharLCDDisplay(DisplayPort):
    """DisplayPort over an ``RPLCD.i2c.CharLCD``.

    Every bus transaction runs in a worker thread; I2C failures surface as
    :class:`ActuatorError` and are never retried here.
    """

    def __init__(self, lcd: Any, *, cols: int = 20) -> None:
        self._lcd = lcd
        self.cols = cols

    @classmethod
    def open(
        cls,
        *,
        expander: str = "PCF8574",
        address: int = 0x27,
        port: int = 1,
        cols: int = 20,
        rows: int = 4,
    ) -> "CharLCDDisplay":
        if CharLCD is None:
            raise HardwareUnavailableError("RPLCD is not installed")
        try:
            lcd = CharLCD(
                i2c_expander=expander,
                address=address,
                port=port,
                cols=cols,
                rows=rows,
                charmap="A00",
                auto_linebreaks=False,
            )
        except OSError as exc:
            raise HardwareUnavailableError(f"LCD at 0x{address:02x} on bus {port}: {exc}") from exc
        logger.info("LCD opened (%s @ 0x%02x, bus %d, %dx%d)", expander, address, port, cols, rows)
        return cls(lcd, cols=cols)

    async def _call(self, action: str, func: Callable[[], None]) -> None:
        try:
            await asyncio.to_thread(func)
        except OSError as exc:
            raise ActuatorError(f"{action} failed: {exc}", device=DEVICE_NAME) from exc

    async def clear(self) -> None:
        await self._call("clear", self._lcd.clear)

    async def write_line(self, row: int, text: str) -> None:
        line = text[: self.cols].ljust(self.cols)

        def _write() -> None:
            self._lcd.cursor_pos = (row, 0)
            self._lcd.write_string(line)

        await self._call(f"write row {row}", _write)

    async def set_blink(self, enabled: bool) -> None:
        def _blink() -> None:
            self._lcd.cursor_mode = "blink" if enabled else "hide"

        await self._call("set blink", _blink)

    async def set_power(self, on: bool) -> None:
        def _power() -> None:
            self._lcd.display_enabled = on
            self._lcd.backlight_enabled = on

        await self._call("set power", _power)

    async def close(self) -> None:
        await self._call("close", lambda: self._lcd.close(clear=True))


__all__ = ["CharLCDDisplay", "RPLCD_AVAILABLE"]
