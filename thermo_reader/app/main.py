"""Process entry point: wire ports, loops and the REST adapter, then run."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

from thermo_reader.api.server import ParameterServer
from thermo_reader.cli.common import install_exception_handlers, install_signal_handlers, parse_args
from thermo_reader.control.alarm_scheduler import AlarmScheduler
from thermo_reader.control.config import THRESHOLD_KEYS, ControllerConfig
from thermo_reader.control.display import FrameRenderer
from thermo_reader.control.errors import ActuatorError, HardwareUnavailableError
from thermo_reader.control.mode_controller import ModeController
from thermo_reader.control.parameter_store import ParameterStore
from thermo_reader.control.types import Thresholds
from thermo_reader.core.asyncio_utils import create_logged_task
from thermo_reader.core.config_manager import ConfigManager, get_config_manager
from thermo_reader.core.logging_config import configure_logging
from thermo_reader.core.logging_utils import get_module_logger
from thermo_reader.core.paths import DEFAULT_CONFIG_PATH
from thermo_reader.core.task_manager import AsyncTaskManager
from thermo_reader.hardware.board import Ports, build_ports


logger = get_module_logger("ThermoReader")

SHUTDOWN_TASK = "shutdown-signal"


class ThermoReaderApp:
    """Owns the two control loops, the optional API server and the ports."""

    def __init__(
        self,
        config: ControllerConfig,
        ports: Ports,
        *,
        config_path: Optional[Path] = None,
        config_manager: Optional[ConfigManager] = None,
        version: str = "0.0.0",
    ) -> None:
        self.config = config
        self.ports = ports
        self.config_path = config_path
        self.config_manager = config_manager or get_config_manager()

        self.store = ParameterStore(config.initial_thresholds())
        renderer = FrameRenderer(
            cols=config.lcd_cols,
            rows=config.lcd_rows,
            advisory_lines=config.advisory_lines,
            error_text=config.error_text,
        )
        self.controller = ModeController(
            ports.sensors,
            ports.display,
            self.store,
            renderer=renderer,
            tick_interval_s=config.tick_interval_s,
            dwell_s=config.dwell_s,
            dwell_interval_s=config.dwell_interval_s,
            exit_policy=config.policy,
        )
        self.alarm = AlarmScheduler(
            ports.alarm,
            self.store,
            interval_s=config.alarm_interval_s,
            pulse_on_s=config.pulse_on_s,
            pulse_period_s=config.pulse_period_s,
        )
        self.api: Optional[ParameterServer] = None
        if config.api_enabled:
            self.api = ParameterServer(self.store, host=config.api_host, port=config.api_port, version=version)

        self.tasks = AsyncTaskManager("ThermoReader", logger=logger)
        self.shutdown_event = asyncio.Event()
        self._pending_writes: set[asyncio.Task[Any]] = set()

        if config.persist_thresholds and config_path is not None:
            self.store.subscribe(self._persist_thresholds)

    def _persist_thresholds(self, previous: Thresholds, updated: Thresholds) -> None:
        updates = {
            key: getattr(updated, attr)
            for attr, key in THRESHOLD_KEYS.items()
            if getattr(previous, attr) != getattr(updated, attr)
        }
        if not updates:
            return
        create_logged_task(
            self.config_manager.write_config_async(self.config_path, updates),
            logger=logger,
            context="persist-thresholds",
            pending=self._pending_writes,
        )

    async def run(self) -> int:
        """Run until a signal arrives or a loop dies; return the exit status."""

        loop = asyncio.get_running_loop()
        install_signal_handlers(self.shutdown_event, loop)

        exit_code = 0
        try:
            if self.api is not None:
                try:
                    await self.api.start()
                except OSError as exc:
                    logger.error("REST adapter could not bind %s: %s", self.api.url, exc)
                    self.api = None

            self.tasks.create(self.controller.run(), name="mode-controller")
            self.tasks.create(self.alarm.run(), name="alarm-scheduler")
            self.tasks.create(self.shutdown_event.wait(), name=SHUTDOWN_TASK)

            logger.info("Controller running%s", " (simulated)" if self.ports.simulated else "")
            first = await self.tasks.wait_first()
            if first is not None and first.get_name() != SHUTDOWN_TASK:
                logger.error("Task %s stopped unexpectedly; shutting down", first.get_name())
                exit_code = 1
            else:
                logger.info("Shutdown requested")
        finally:
            await self.shutdown()

        return exit_code

    async def shutdown(self) -> None:
        """Cancel the loops, then silence the buzzer and blank the display."""

        await self.tasks.shutdown(timeout=2.0)

        try:
            await self.alarm.shutdown()
        except ActuatorError as exc:
            logger.error("Buzzer off failed during shutdown: %s", exc)

        try:
            await self.controller.shutdown()
        except ActuatorError as exc:
            logger.error("Display off failed during shutdown: %s", exc)

        if self.api is not None:
            await self.api.stop()

        if self._pending_writes:
            await asyncio.gather(*self._pending_writes, return_exceptions=True)

        await self.ports.release()
        logger.info("Controller stopped")


async def main(argv: Optional[list[str]] = None) -> int:
    from thermo_reader import __version__

    args = parse_args(argv)
    config_path = args.config or DEFAULT_CONFIG_PATH
    config_manager = get_config_manager()

    raw_config = await config_manager.read_config_async(config_path)
    try:
        config = ControllerConfig.from_config(raw_config, args)
    except ValueError as exc:
        configure_logging("info")
        logger.error("Invalid configuration in %s: %s", config_path, exc)
        return 1

    configure_logging(config.log_level, log_file=config.log_file)
    install_exception_handlers(logger, asyncio.get_running_loop())
    logger.info("thermo-reader %s starting (config %s)", __version__, config_path)

    try:
        ports = build_ports(config)
    except HardwareUnavailableError as exc:
        logger.error("Hardware unavailable: %s", exc)
        return 1

    app = ThermoReaderApp(
        config,
        ports,
        config_path=config_path,
        config_manager=config_manager,
        version=__version__,
    )
    return await app.run()


__all__ = ["ThermoReaderApp", "main"]
