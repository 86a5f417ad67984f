"""
HTTP middlewares: error rendering and CORS.
"""

import logging
from typing import Iterable

from aiohttp import web

from datagate.core.exceptions import DataError, ErrorCode

logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.VALIDATION: 400,
    ErrorCode.ADAPTER: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.UNKNOWN: 500,
}

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization"
CORS_MAX_AGE = "86400"


def error_response(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Render DataError and unexpected exceptions as ``{"error": ...}``."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except DataError as e:
        return error_response(str(e), _STATUS_BY_CODE[e.code])
    except Exception:
        logger.exception("Unhandled error for %s %s", request.method, request.path)
        return error_response("Internal server error", _STATUS_BY_CODE[ErrorCode.UNKNOWN])


def cors_middleware(origins: Iterable[str]):
    """Build a CORS middleware for the given allowed origins.

    ``*`` in ``origins`` allows any origin.
    """
    allowed = frozenset(origins)
    allow_any = "*" in allowed

    def cors_headers(request: web.Request) -> dict[str, str]:
        origin = request.headers.get("Origin")
        if allow_any:
            return {"Access-Control-Allow-Origin": "*"}
        if origin and origin in allowed:
            return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
        return {}

    @web.middleware
    async def middleware(request: web.Request, handler):
        headers = cors_headers(request)

        # Preflight
        if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
            if headers:
                headers.update(
                    {
                        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
                        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
                        "Access-Control-Max-Age": CORS_MAX_AGE,
                    }
                )
            return web.Response(status=204, headers=headers)

        try:
            response = await handler(request)
        except web.HTTPException as exc:
            exc.headers.update(headers)
            raise
        response.headers.update(headers)
        return response

    return middleware
