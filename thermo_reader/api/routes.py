"""
Property Routes - readings and thresholds exposed as named properties.

Readable: temperature, distance, mode (read-only) and the three thresholds.
Writable: temperatureThreshold, distanceThreshold, alarmEnabled. Writes are
clamped by the ParameterStore and take effect at the next control tick.
"""

from typing import Any, Callable, Dict, Tuple

from aiohttp import web

from thermo_reader.control.parameter_store import ParameterStore

from .middleware import create_error_response, parse_json_body

READ_ONLY = ("temperature", "distance", "mode")


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number")
    return float(value)


def _boolean(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be true or false")
    return value


# property name -> (ParameterStore.set_thresholds keyword, coercion)
WRITABLE: Dict[str, Tuple[str, Callable[[str, Any], Any]]] = {
    "temperatureThreshold": ("temperature_c", _number),
    "distanceThreshold": ("distance_cm", _number),
    "alarmEnabled": ("alarm_enabled", _boolean),
}

PROPERTY_NAMES = (*READ_ONLY, *WRITABLE)


def setup_property_routes(app: web.Application) -> None:
    """Register health and property routes."""
    app.router.add_get("/api/v1/health", health_handler)
    app.router.add_get("/api/v1/properties", list_properties_handler)
    app.router.add_get("/api/v1/properties/{name}", get_property_handler)
    app.router.add_put("/api/v1/properties/{name}", put_property_handler)


def _unknown(name: str) -> web.Response:
    return create_error_response(
        "UNKNOWN_PROPERTY",
        f"Unknown property '{name}'",
        status=404,
        details={"properties": list(PROPERTY_NAMES)},
    )


async def health_handler(request: web.Request) -> web.Response:
    """GET /api/v1/health - Health check."""
    return web.json_response({"status": "healthy", "version": request.app["version"]})


async def list_properties_handler(request: web.Request) -> web.Response:
    """GET /api/v1/properties - Latest reading, thresholds and mode."""
    store: ParameterStore = request.app["store"]
    return web.json_response(store.snapshot())


async def get_property_handler(request: web.Request) -> web.Response:
    """GET /api/v1/properties/{name} - One property."""
    name = request.match_info["name"]
    if name not in PROPERTY_NAMES:
        return _unknown(name)
    store: ParameterStore = request.app["store"]
    return web.json_response({name: store.snapshot()[name]})


async def put_property_handler(request: web.Request) -> web.Response:
    """PUT /api/v1/properties/{name} - Update a threshold; returns the stored value."""
    name = request.match_info["name"]
    if name in READ_ONLY:
        return create_error_response("READ_ONLY", f"Property '{name}' is read-only", status=403)
    if name not in WRITABLE:
        return _unknown(name)

    body, error = await parse_json_body(request)
    if error:
        return error
    if name not in body:
        return create_error_response("MISSING_FIELD", f"Body must contain '{name}'", status=400)

    keyword, coerce = WRITABLE[name]
    value = coerce(name, body[name])

    store: ParameterStore = request.app["store"]
    store.set_thresholds(**{keyword: value})
    return web.json_response({name: store.snapshot()[name]})
