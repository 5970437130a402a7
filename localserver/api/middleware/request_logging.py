"""Request logging middleware with request-id propagation.

Every request is logged with method, path, status and elapsed time. The
request id is taken from ``X-Request-ID`` when the client sends one,
otherwise generated, and is echoed on the response.
"""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from contextvars import ContextVar

from aiohttp import web

logger = logging.getLogger(__name__)

# Context variable for storing the request id of the current request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


@web.middleware
async def request_logging_middleware(
    request: web.Request, handler: Callable[[web.Request], Awaitable[web.StreamResponse]]
) -> web.StreamResponse:
    """Log the request and tag it with a request id.

    Args:
        request: aiohttp request object
        handler: Next handler in middleware chain

    Returns:
        Handler response with ``X-Request-ID`` set
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request_id_var.set(request_id)
    request["request_id"] = request_id

    started = time.perf_counter()
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.path, exc.status, elapsed_ms)
        exc.headers["X-Request-ID"] = request_id
        raise
    except ConnectionResetError:
        # Listener was force-closed under us; nothing left to respond to.
        logger.debug("%s %s dropped: connection closed", request.method, request.path)
        raise

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %d (%.1f ms)", request.method, request.path, response.status, elapsed_ms)
    response.headers["X-Request-ID"] = request_id
    return response


def get_request_id() -> str:
    """Get current request id from context.

    Returns:
        Current request id, or "no-request-id" outside a request
    """
    request_id = request_id_var.get()
    return request_id if request_id else "no-request-id"
