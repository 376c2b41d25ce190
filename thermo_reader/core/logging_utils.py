"""Component-scoped logging helpers for the controller."""

from __future__ import annotations

import logging
from typing import Optional, Union

LOGGER_NAMESPACE = "thermo_reader"
DEFAULT_COMPONENT = "Controller"


def _normalize_logger_name(name: Optional[str]) -> str:
    if not name:
        return LOGGER_NAMESPACE
    if name.startswith(LOGGER_NAMESPACE):
        return name
    return f"{LOGGER_NAMESPACE}.{name}"


def _derive_component(name: str) -> str:
    if not name:
        return DEFAULT_COMPONENT
    if name.startswith(LOGGER_NAMESPACE):
        suffix = name[len(LOGGER_NAMESPACE):].lstrip(".")
        # thermo_reader.control.mode_controller -> mode_controller
        return suffix.rsplit(".", 1)[-1] or DEFAULT_COMPONENT
    return name


class StructuredLogger:
    """Wrapper that prefixes every message with its ``[Component]`` tag."""

    __slots__ = ("_logger", "_component")

    def __init__(self, logger: logging.Logger, component: Optional[str] = None) -> None:
        object.__setattr__(self, "_logger", logger)
        resolved = component or _derive_component(logger.name)
        object.__setattr__(self, "_component", resolved or DEFAULT_COMPONENT)

    def __getattr__(self, item):
        return getattr(self._logger, item)

    def __setattr__(self, key, value):
        if key in self.__slots__:
            object.__setattr__(self, key, value)
        else:
            setattr(self._logger, key, value)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"StructuredLogger({self._logger!r}, component={self._component!r})"

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def component(self) -> str:
        return self._component

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    # ------------------------------------------------------------------
    # Formatting helpers

    def _compose(self, message: object, args: tuple) -> str:
        text = str(message)
        if args:
            try:
                text = text % args
            except (TypeError, ValueError):
                safe_args = " ".join(str(arg) for arg in args)
                text = f"{text} | args={safe_args}"
        prefix = f"[{self._component}]"
        if not text.startswith(prefix):
            text = f"{prefix} {text}"
        return text

    def _emit(self, level: int, message: object, *args, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return
        kwargs.setdefault("stacklevel", 3)
        self._logger.log(level, self._compose(message, args), **kwargs)

    # ------------------------------------------------------------------
    # Logging API surface

    def log(self, level: int, message: object, *args, **kwargs) -> None:
        self._emit(level, message, *args, **kwargs)

    def debug(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.INFO, message, *args, **kwargs)

    def warning(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.WARNING, message, *args, **kwargs)

    def error(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: object, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self._emit(logging.ERROR, message, *args, **kwargs)

    def critical(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.CRITICAL, message, *args, **kwargs)


LoggerLike = Union[StructuredLogger, logging.Logger, logging.LoggerAdapter, None]


def ensure_structured_logger(
    logger: LoggerLike,
    *,
    component: Optional[str] = None,
    fallback_name: Optional[str] = None,
) -> StructuredLogger:
    """Return a StructuredLogger wrapping ``logger`` (or a new module logger)."""

    if isinstance(logger, StructuredLogger):
        return logger
    if isinstance(logger, logging.LoggerAdapter):
        return StructuredLogger(logger.logger, component=component)
    if isinstance(logger, logging.Logger):
        return StructuredLogger(logger, component=component)
    return get_module_logger(fallback_name)


def get_module_logger(name: Optional[str] = None) -> StructuredLogger:
    """Return a structured logger scoped to the thermo_reader namespace."""
    return StructuredLogger(logging.getLogger(_normalize_logger_name(name)))


__all__ = [
    "LoggerLike",
    "StructuredLogger",
    "ensure_structured_logger",
    "get_module_logger",
]
