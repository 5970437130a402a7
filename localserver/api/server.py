"""aiohttp application factory for the local control server."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable

from aiohttp import web

from ..core.settings import ServerSettings
from .middleware import cors_middleware, request_logging_middleware
from .routes import register_api_routes, register_cert_routes, register_static_routes
from .routes.api_routes import now_utc

logger = logging.getLogger(__name__)


def make_app(
    settings: ServerSettings,
    port_provider: Callable[[], int],
    log: Callable[[str], None] | None = None,
    time_provider: Callable[[], datetime.datetime] = now_utc,
) -> web.Application:
    """Create the aiohttp application with all routes and middleware.

    Middleware order: request logging wraps CORS, so logged statuses are the
    final ones and every response (errors included) carries CORS headers.

    Args:
        settings: Server settings (certificate path)
        port_provider: Returns the effective listener port
        log: Optional sink for diagnostic lines
        time_provider: Returns the current time for timestamps

    Returns:
        Configured aiohttp web application
    """
    app = web.Application(middlewares=[request_logging_middleware, cors_middleware])

    register_static_routes(app, port_provider, time_provider)
    register_api_routes(app, time_provider)
    register_cert_routes(app, settings.certificate_path, log)

    async def _shutdown(_app: web.Application) -> None:
        logger.debug("Application shutdown requested")

    app.on_shutdown.append(_shutdown)
    return app
