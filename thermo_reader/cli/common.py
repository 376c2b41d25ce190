from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys
from pathlib import Path
from typing import Any, Optional

from thermo_reader.control.types import ExitPolicy
from thermo_reader.core.logging_config import LOG_LEVELS


def _positive_number(value: str, typ: type, name: str):
    """Generic positive number validator for argparse."""
    try:
        parsed = typ(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Value must be a {name}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("Value must be positive")
    return parsed


def positive_int(value: str) -> int:
    return _positive_number(value, int, "integer")


def port_number(value: str) -> int:
    port = positive_int(value)
    if port > 65535:
        raise argparse.ArgumentTypeError("Port must be at most 65535")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thermo-reader",
        description="Temperature / presence controller driving a 20x4 LCD and a buzzer",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: packaged config.txt)",
    )

    # Overrides default to None so unset flags keep the config-file value.
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default=None,
        help="Logging verbosity",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path for a rotating log file",
    )

    parser.add_argument(
        "--simulate",
        action="store_true",
        default=False,
        help="Use simulated sensors, display and buzzer",
    )

    parser.add_argument(
        "--no-api",
        dest="no_api",
        action="store_true",
        default=False,
        help="Do not start the REST adapter",
    )

    parser.add_argument(
        "--api-host",
        type=str,
        default=None,
        help="Host for the REST adapter (default: 127.0.0.1)",
    )

    parser.add_argument(
        "--api-port",
        type=port_number,
        default=None,
        help="Port for the REST adapter (default: 8888)",
    )

    parser.add_argument(
        "--exit-policy",
        choices=[policy.value for policy in ExitPolicy],
        default=None,
        help="When to leave the active display: after the dwell only, or also as soon as nobody is near",
    )

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def install_exception_handlers(
    logger: Any,
    loop: Optional[asyncio.AbstractEventLoop] = None
) -> None:
    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = handle_exception

    if loop is not None:
        def handle_asyncio_exception(loop, context):
            exception = context.get('exception')
            message = context.get('message', 'Unhandled asyncio exception')
            if exception:
                logger.error("Asyncio exception: %s", message, exc_info=exception)
            else:
                logger.error("Asyncio error: %s, context: %s", message, context)

        loop.set_exception_handler(handle_asyncio_exception)


def install_signal_handlers(shutdown_event: asyncio.Event, loop: asyncio.AbstractEventLoop) -> None:
    """Register SIGINT/SIGTERM handlers that set ``shutdown_event``."""

    def signal_handler():
        if not shutdown_event.is_set():
            shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, signal_handler)
