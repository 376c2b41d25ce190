"""
API Middleware - error envelope and request logging for the REST adapter.

Every error leaves the server as:
{
    "error": {"code": "ERROR_CODE", "message": "Human-readable message"},
    "status": 400
}
"""

import time
from typing import Callable, Optional

from aiohttp import web

from thermo_reader.core.logging_utils import get_module_logger


logger = get_module_logger("APIMiddleware")


def create_error_response(code: str, message: str, status: int = 400, details: Optional[dict] = None) -> web.Response:
    """Create standardized error response."""
    error = {"error": {"code": code, "message": message}, "status": status}
    if details:
        error["error"]["details"] = details
    return web.json_response(error, status=status)


@web.middleware
async def request_logging_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Log method, path, status and timing at debug level."""
    start_time = time.perf_counter()
    response = await handler(request)
    logger.debug(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.path,
        response.status,
        (time.perf_counter() - start_time) * 1000,
    )
    return response


@web.middleware
async def error_handling_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Catch and format all errors as JSON responses."""
    try:
        return await handler(request)
    except web.HTTPException as e:
        # aiohttp HTTP exceptions (404, 405, ...)
        return create_error_response(
            e.reason.upper().replace(" ", "_") if e.reason else "HTTP_ERROR",
            e.text or str(e),
            status=e.status,
        )
    except ValueError as e:
        logger.warning("Validation error: %s", e)
        return create_error_response("VALIDATION_ERROR", str(e), status=400)
    except Exception as e:
        logger.exception("Unexpected error handling %s %s", request.method, request.path)
        return create_error_response(
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            status=500,
            details={"type": type(e).__name__, "message": str(e)},
        )


async def parse_json_body(request: web.Request):
    """Parse a JSON object body. Returns (body, error_response)."""
    try:
        body = await request.json()
    except ValueError:
        return None, create_error_response("INVALID_BODY", "Request body must be valid JSON", status=400)
    if not isinstance(body, dict) or not body:
        return None, create_error_response("EMPTY_BODY", "Request body must be a non-empty JSON object", status=400)
    return body, None
