"""Shared pytest configuration and fixtures for the thermo-reader test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring physical hardware"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require physical hardware",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if item.get_closest_marker("hardware") is not None:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def w1_payload_ok() -> str:
    return (
        "72 01 4b 46 7f ff 0e 10 57 : crc=57 YES\n"
        "72 01 4b 46 7f ff 0e 10 57 t=23125\n"
    )


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def fake_sensors():
    """In-memory SensorPort: 20.0C and 80cm until changed."""
    from tests.infrastructure.mocks.hardware_mocks import FakeSensorPort
    return FakeSensorPort(temperature=20.0, distance=80.0)


@pytest.fixture
def recording_display():
    from tests.infrastructure.mocks.hardware_mocks import RecordingDisplay
    return RecordingDisplay()


@pytest.fixture
def recording_alarm():
    from tests.infrastructure.mocks.hardware_mocks import RecordingAlarm
    return RecordingAlarm()


@pytest.fixture
def fake_gpio():
    from tests.infrastructure.mocks.hardware_mocks import FakeGPIO
    return FakeGPIO()


@pytest.fixture
def manual_clock():
    from tests.infrastructure.mocks.hardware_mocks import ManualClock
    return ManualClock()
