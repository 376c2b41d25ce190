"""Unit tests for AsyncTaskManager and create_logged_task."""

import asyncio
import logging

import pytest

from thermo_reader.core.asyncio_utils import create_logged_task
from thermo_reader.core.task_manager import AsyncTaskManager


class TestAsyncTaskManager:

    @pytest.mark.asyncio
    async def test_wait_first_returns_finished_task(self):
        manager = AsyncTaskManager("Test")
        event = asyncio.Event()
        manager.create(asyncio.sleep(10), name="sleeper")
        manager.create(event.wait(), name="signal")

        event.set()
        first = await manager.wait_first()

        assert first.get_name() == "signal"
        assert manager.active_names() == ["sleeper"]
        assert await manager.shutdown(timeout=1.0) is True

    @pytest.mark.asyncio
    async def test_shutdown_cancels_and_refuses_new_tasks(self):
        manager = AsyncTaskManager("Test")
        task = manager.create(asyncio.sleep(10), name="sleeper")

        assert await manager.shutdown(timeout=1.0) is True
        assert task.cancelled()

        coro = asyncio.sleep(0)
        with pytest.raises(RuntimeError):
            manager.create(coro)
        coro.close()

    @pytest.mark.asyncio
    async def test_done_callback_runs(self):
        manager = AsyncTaskManager("Test")
        seen = []

        async def work():
            return 42

        manager.create(work(), name="work", done_callback=lambda task: seen.append(task.result()))
        await manager.wait_first()
        await asyncio.sleep(0)

        assert seen == [42]

    @pytest.mark.asyncio
    async def test_failed_task_is_logged(self, caplog):
        manager = AsyncTaskManager("Test")

        async def boom():
            raise RuntimeError("loop died")

        with caplog.at_level(logging.ERROR):
            manager.create(boom(), name="boom")
            await manager.wait_first()
            await asyncio.sleep(0)

        assert "loop died" in caplog.text


@pytest.mark.asyncio
async def test_create_logged_task_tracks_pending(caplog):
    pending = set()

    async def boom():
        raise ValueError("write failed")

    with caplog.at_level(logging.ERROR):
        task = create_logged_task(boom(), context="persist", pending=pending)
        assert task in pending
        await asyncio.gather(task, return_exceptions=True)
        await asyncio.sleep(0)

    assert pending == set()
    assert "Unhandled exception in persist" in caplog.text
