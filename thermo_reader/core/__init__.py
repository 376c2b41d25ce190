"""Shared infrastructure: logging, config, task management."""

from .asyncio_utils import create_logged_task
from .config_manager import ConfigManager, get_config_manager
from .logging_config import configure_logging
from .logging_utils import StructuredLogger, get_module_logger
from .task_manager import AsyncTaskManager

__all__ = [
    "AsyncTaskManager",
    "ConfigManager",
    "StructuredLogger",
    "configure_logging",
    "create_logged_task",
    "get_config_manager",
    "get_module_logger",
]
