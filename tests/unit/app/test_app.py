"""Integration-style tests for the application wiring and shutdown."""

import asyncio

import pytest

from thermo_reader.app import main as app_main
from thermo_reader.app.main import ThermoReaderApp
from thermo_reader.control.config import ControllerConfig
from thermo_reader.control.types import Mode
from thermo_reader.core.config_manager import ConfigManager
from thermo_reader.hardware.board import Ports


def _fast_config(**overrides):
    values = dict(
        temperature_threshold_c=17.0,
        distance_threshold_cm=120.0,
        tick_interval_s=0.05,
        dwell_s=5.0,
        dwell_interval_s=0.05,
        api_enabled=False,
    )
    values.update(overrides)
    return ControllerConfig(**values)


@pytest.fixture
def ports(fake_sensors, recording_display, recording_alarm):
    return Ports(sensors=fake_sensors, display=recording_display, alarm=recording_alarm)


class TestThermoReaderApp:

    @pytest.mark.asyncio
    async def test_run_and_shutdown(self, ports, recording_display, recording_alarm, fake_sensors):
        app = ThermoReaderApp(_fast_config(), ports)
        runner = asyncio.create_task(app.run())

        await asyncio.sleep(0.3)
        assert app.controller.mode is Mode.WARNING
        assert recording_alarm.pulses >= 1
        assert recording_display.lines[1].rstrip() == "AVERTISSEMENT!!!"

        app.shutdown_event.set()
        exit_code = await asyncio.wait_for(runner, timeout=5.0)

        assert exit_code == 0
        assert recording_alarm.level is False
        assert recording_alarm.closed
        assert not recording_display.powered
        assert recording_display.closed
        assert fake_sensors.closed

    @pytest.mark.asyncio
    async def test_threshold_edits_are_persisted(self, ports, tmp_path):
        config_path = tmp_path / "config.txt"
        config_path.write_text("temperature_threshold_c = 17.0\n", encoding="utf-8")
        manager = ConfigManager(overrides_dir=tmp_path / "overrides")
        app = ThermoReaderApp(_fast_config(), ports, config_path=config_path, config_manager=manager)
        runner = asyncio.create_task(app.run())

        await asyncio.sleep(0.05)
        app.store.set_thresholds(temperature_c=22.0, alarm_enabled=False)
        app.shutdown_event.set()
        await asyncio.wait_for(runner, timeout=5.0)

        text = config_path.read_text(encoding="utf-8")
        assert "temperature_threshold_c = 22.0" in text
        assert "alarm_enabled = false" in text
        assert "distance_threshold_cm" not in text

    @pytest.mark.asyncio
    async def test_dead_loop_exits_with_error(self, ports, fake_sensors):
        app = ThermoReaderApp(_fast_config(), ports)

        async def broken_run():
            raise RuntimeError("unexpected")

        app.alarm.run = broken_run
        exit_code = await asyncio.wait_for(app.run(), timeout=5.0)

        assert exit_code == 1
        assert fake_sensors.closed


class TestMain:

    @pytest.fixture(autouse=True)
    def _quiet_logging(self, monkeypatch):
        monkeypatch.setattr(app_main, "configure_logging", lambda *args, **kwargs: None)
        monkeypatch.setattr(app_main, "install_exception_handlers", lambda *args, **kwargs: None)

    @pytest.mark.asyncio
    async def test_invalid_config_exits_1(self, tmp_path):
        config_path = tmp_path / "config.txt"
        config_path.write_text("exit_policy = sometimes\n", encoding="utf-8")

        assert await app_main.main(["--config", str(config_path)]) == 1

    @pytest.mark.asyncio
    async def test_unknown_log_level_exits_1(self, tmp_path):
        config_path = tmp_path / "config.txt"
        config_path.write_text("log_level = chatty\n", encoding="utf-8")

        assert await app_main.main(["--config", str(config_path)]) == 1

    @pytest.mark.asyncio
    async def test_missing_hardware_exits_1(self, tmp_path):
        config_path = tmp_path / "config.txt"
        config_path.write_text(f"w1_device_path = {tmp_path / 'missing' / 'w1_slave'}\n", encoding="utf-8")

        assert await app_main.main(["--config", str(config_path), "--no-api"]) == 1
