"""Pytest fixtures for API unit tests.

The REST adapter only talks to a ParameterStore, so tests build a real store
and drive it through an aiohttp test client.
"""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, TypeVar

import pytest
from aiohttp import web

from thermo_reader.api.server import create_app
from thermo_reader.control.parameter_store import ParameterStore
from thermo_reader.control.types import Reading, Thresholds


T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine synchronously for testing."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def create_test_app(store: ParameterStore) -> web.Application:
    """Create an aiohttp application wired to ``store``."""
    return create_app(store, version="1.2.3")


@pytest.fixture
def store() -> ParameterStore:
    """Store holding one reading with an out-of-range distance."""
    store = ParameterStore(Thresholds(temperature_c=17.0, distance_cm=120.0, alarm_enabled=True))
    store.publish_reading(Reading(temperature_c=18.5, distance_cm=float("inf"), timestamp=1700000000.0))
    store.publish_mode("idle")
    return store
