"""
REST adapter for the thermo-reader controller.

Provides HTTP endpoints for reading live sensor values and editing the
thresholds held by the ParameterStore.
"""

from .server import ParameterServer, create_app

__all__ = ["ParameterServer", "create_app"]
