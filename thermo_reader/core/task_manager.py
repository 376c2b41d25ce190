"""Tracking and cancellation of the controller's long-running asyncio tasks."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Optional

from .logging_utils import LoggerLike, ensure_structured_logger


@dataclass(slots=True)
class _TaskRecord:
    task: asyncio.Task
    name: str
    created: float
    done_callback: Optional[Callable[[asyncio.Task], None]]


class AsyncTaskManager:
    """Keep track of spawned loops and shut them down within a deadline."""

    def __init__(self, name: Optional[str] = None, logger: LoggerLike = None) -> None:
        self._name = name or self.__class__.__name__
        self._logger = ensure_structured_logger(logger, fallback_name=self._name)
        self._closed = False
        self._records: dict[asyncio.Task, _TaskRecord] = {}

    def create(
        self,
        coro: Awaitable,
        *,
        name: Optional[str] = None,
        done_callback: Optional[Callable[[asyncio.Task], None]] = None,
    ) -> asyncio.Task:
        """Create and register a task on the current running loop."""

        if self._closed:
            raise RuntimeError(f"{self._name} is shutting down; no new tasks permitted")

        loop = asyncio.get_running_loop()
        task_name = name or getattr(coro, "__name__", None) or repr(coro)
        task = loop.create_task(coro, name=task_name)
        record = _TaskRecord(task=task, name=task_name, created=time.perf_counter(), done_callback=done_callback)
        self._records[task] = record
        task.add_done_callback(self._finalize)
        return task

    def _finalize(self, task: asyncio.Task) -> None:
        record = self._records.pop(task, None)
        name = record.name if record else task.get_name()
        status = self._log_task_result(task, name)
        elapsed_s = time.perf_counter() - record.created if record else 0.0
        self._logger.debug("%s task %s finished (%s) after %.1fs", self._name, name, status, elapsed_s)
        if record and record.done_callback is not None:
            try:
                record.done_callback(task)
            except Exception:  # pragma: no cover - logging only
                self._logger.exception("%s done callback failed", self._name)

    async def wait_first(self) -> Optional[asyncio.Task]:
        """Block until any tracked task finishes; return it."""

        pending = [task for task in self._records if not task.done()]
        if not pending:
            return None
        done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
        return next(iter(done))

    async def shutdown(self, *, timeout: float = 5.0) -> bool:
        """Cancel outstanding tasks and wait for their completion."""

        self._closed = True
        pending = [task for task in self._records if not task.done()]
        if not pending:
            return True

        for task in pending:
            task.cancel()

        try:
            await asyncio.wait_for(asyncio.gather(*pending, return_exceptions=True), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            hanging = [task.get_name() for task in pending if not task.done()]
            self._logger.warning(
                "%s shutdown timed out after %.1fs; still pending: %s",
                self._name,
                timeout,
                ", ".join(hanging),
            )
            return False

    def active_names(self) -> list[str]:
        return [rec.name for rec in self._records.values() if not rec.task.done()]

    def _log_task_result(self, task: asyncio.Task, name: str) -> str:
        if task.cancelled():
            return "cancelled"

        exc = task.exception()
        if exc is not None:
            self._logger.error("%s task %s failed: %s", self._name, name, exc, exc_info=exc)
            return f"error:{exc.__class__.__name__}"

        return "completed"


__all__ = ["AsyncTaskManager"]
