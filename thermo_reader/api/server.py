"""
API Server - aiohttp REST adapter over the ParameterStore.

The server shares the controller's event loop; handlers only touch the
store, never the sensors or the display.
"""

from typing import Optional

from aiohttp import web

from thermo_reader.control.parameter_store import ParameterStore
from thermo_reader.core.logging_utils import get_module_logger

from .middleware import error_handling_middleware, request_logging_middleware
from .routes import setup_property_routes


logger = get_module_logger("APIServer")


def create_app(store: ParameterStore, version: str = "0.0.0") -> web.Application:
    """Create and configure the aiohttp application."""
    app = web.Application(middlewares=[request_logging_middleware, error_handling_middleware])
    app["store"] = store
    app["version"] = version
    setup_property_routes(app)
    return app


class ParameterServer:
    """
    REST server exposing live readings and remotely settable thresholds.

    Args:
        store: ParameterStore shared with the control loops
        host: Host to bind to (default: localhost only)
        port: Port to bind to (default: 8888)
        version: Reported by /api/v1/health
    """

    def __init__(
        self,
        store: ParameterStore,
        host: str = "127.0.0.1",
        port: int = 8888,
        version: str = "0.0.0",
    ):
        self.store = store
        self.host = host
        self.port = port
        self.version = version

        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._running = False

    async def start(self) -> None:
        """Start the API server (non-blocking)."""
        if self._running:
            logger.warning("API server already running")
            return

        self._runner = web.AppRunner(create_app(self.store, self.version))
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        self._running = True
        logger.info("API server started on %s", self.url)

    async def stop(self) -> None:
        """Stop the API server gracefully."""
        if not self._running:
            return

        logger.info("Stopping API server...")

        if self._site:
            await self._site.stop()
            self._site = None

        if self._runner:
            await self._runner.cleanup()
            self._runner = None

        self._running = False
        logger.info("API server stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"
