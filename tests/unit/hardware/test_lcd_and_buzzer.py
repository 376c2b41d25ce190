"""Unit tests for the RPLCD display port and the GPIO buzzer."""

from unittest.mock import MagicMock

import pytest

from thermo_reader.control.errors import ActuatorError, HardwareUnavailableError
from thermo_reader.hardware import lcd as lcd_module
from thermo_reader.hardware.buzzer import GPIOBuzzer
from thermo_reader.hardware.lcd import CharLCDDisplay
from tests.infrastructure.mocks.hardware_mocks import FakeGPIO


class TestCharLCDDisplay:

    @pytest.mark.asyncio
    async def test_write_line_positions_cursor(self):
        lcd = MagicMock()
        display = CharLCDDisplay(lcd, cols=20)

        await display.write_line(2, "VEUILLEZ CALIBRER")

        assert lcd.cursor_pos == (2, 0)
        lcd.write_string.assert_called_once_with("VEUILLEZ CALIBRER".ljust(20))

    @pytest.mark.asyncio
    async def test_blink_maps_to_cursor_mode(self):
        lcd = MagicMock()
        display = CharLCDDisplay(lcd)

        await display.set_blink(True)
        assert lcd.cursor_mode == "blink"

        await display.set_blink(False)
        assert lcd.cursor_mode == "hide"

    @pytest.mark.asyncio
    async def test_power_toggles_display_and_backlight(self):
        lcd = MagicMock()
        display = CharLCDDisplay(lcd)

        await display.set_power(False)

        assert lcd.display_enabled is False
        assert lcd.backlight_enabled is False

    @pytest.mark.asyncio
    async def test_bus_error_becomes_actuator_error(self):
        lcd = MagicMock()
        lcd.clear.side_effect = OSError(121, "Remote I/O error")
        display = CharLCDDisplay(lcd)

        with pytest.raises(ActuatorError) as excinfo:
            await display.clear()
        assert excinfo.value.device == "lcd"

    def test_open_without_rplcd(self, monkeypatch):
        monkeypatch.setattr(lcd_module, "CharLCD", None)
        with pytest.raises(HardwareUnavailableError):
            CharLCDDisplay.open()

    def test_open_failure_is_startup_error(self, monkeypatch):
        monkeypatch.setattr(lcd_module, "CharLCD", MagicMock(side_effect=OSError(2, "No such file")))
        with pytest.raises(HardwareUnavailableError):
            CharLCDDisplay.open(address=0x3F)


class TestGPIOBuzzer:

    def test_active_high(self):
        gpio = FakeGPIO()
        buzzer = GPIOBuzzer(18, gpio=gpio)

        buzzer.set_level(True)
        buzzer.set_level(False)

        assert gpio.setups[0] == (18, gpio.OUT, {"initial": gpio.LOW})
        assert gpio.outputs == [(18, gpio.HIGH), (18, gpio.LOW)]

    def test_active_low(self):
        gpio = FakeGPIO()
        buzzer = GPIOBuzzer(18, active_low=True, gpio=gpio)

        buzzer.set_level(True)

        assert gpio.setups[0] == (18, gpio.OUT, {"initial": gpio.HIGH})
        assert gpio.outputs == [(18, gpio.LOW)]
        assert buzzer.level is True

    def test_close_silences_and_releases(self):
        gpio = FakeGPIO()
        buzzer = GPIOBuzzer(18, gpio=gpio)
        buzzer.set_level(True)

        buzzer.close()

        assert gpio.outputs[-1] == (18, gpio.LOW)
        assert gpio.cleaned == [18]
        assert buzzer.level is False

    def test_output_error_becomes_actuator_error(self):
        gpio = FakeGPIO()
        buzzer = GPIOBuzzer(18, gpio=gpio)
        gpio.output = MagicMock(side_effect=RuntimeError("channel not set up"))

        with pytest.raises(ActuatorError):
            buzzer.set_level(True)
