"""JSON API routes: /api/status and /api/hello."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable

from aiohttp import web

logger = logging.getLogger(__name__)

HELLO_MESSAGE = "Hello from Flutter Server!"


def now_utc() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def register_api_routes(
    app: web.Application,
    time_provider: Callable[[], datetime.datetime] = now_utc,
) -> None:
    """Register the JSON API routes.

    Args:
        app: aiohttp web application
        time_provider: Returns the current (timezone-aware) time
    """

    async def status(_request: web.Request) -> web.Response:
        """Liveness endpoint; also the target of the health-check probe."""
        return web.json_response(
            {"status": "running", "timestamp": time_provider().isoformat()}
        )

    async def hello(_request: web.Request) -> web.Response:
        return web.json_response(
            {"message": HELLO_MESSAGE, "timestamp": time_provider().isoformat()}
        )

    app.router.add_get("/api/status", status)
    app.router.add_get("/api/hello", hello)

    logger.debug("API routes registered")
