"""Home page route: GET /."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from string import Template

from aiohttp import web

logger = logging.getLogger(__name__)

HOME_PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Local Server</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 800px;
            margin: 0 auto;
            padding: 20px;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            color: white;
            min-height: 100vh;
        }
        .container {
            background: rgba(255, 255, 255, 0.1);
            padding: 30px;
            border-radius: 15px;
        }
        h1 { text-align: center; margin-bottom: 30px; }
        .status, .api-endpoints {
            background: rgba(255, 255, 255, 0.15);
            padding: 20px;
            border-radius: 10px;
            margin: 20px 0;
        }
        .endpoint {
            background: rgba(255, 255, 255, 0.1);
            padding: 10px;
            margin: 10px 0;
            border-radius: 5px;
            font-family: monospace;
        }
        .timestamp { font-size: 0.9em; opacity: 0.8; }
    </style>
</head>
<body>
    <div class="container">
        <h1>Local Server</h1>

        <div class="status">
            <h2>Server Status</h2>
            <p><strong>Status:</strong> Running</p>
            <p><strong>Port:</strong> $port</p>
            <p><strong>Started:</strong> <span class="timestamp">$timestamp</span></p>
        </div>

        <div class="api-endpoints">
            <h2>Available Endpoints</h2>
            <div class="endpoint"><strong>GET /</strong> - This home page</div>
            <div class="endpoint"><strong>GET /api/status</strong> - Server status JSON</div>
            <div class="endpoint"><strong>GET /api/hello</strong> - Hello message JSON</div>
            <div class="endpoint"><strong>GET /cert</strong> - Download the local CA certificate</div>
        </div>
    </div>

    <script>
        // Auto-refresh status every 30 seconds
        setTimeout(() => { location.reload(); }, 30000);
    </script>
</body>
</html>
""")


def render_home_page(port: int, timestamp: datetime.datetime) -> str:
    return HOME_PAGE_TEMPLATE.substitute(port=port, timestamp=timestamp.isoformat(sep=" "))


def register_static_routes(
    app: web.Application,
    port_provider: Callable[[], int],
    time_provider: Callable[[], datetime.datetime],
) -> None:
    """Register the HTML status page.

    Args:
        app: aiohttp web application
        port_provider: Returns the port the listener is bound to
        time_provider: Returns the current time
    """

    async def home(_request: web.Request) -> web.Response:
        return web.Response(
            text=render_home_page(port_provider(), time_provider()),
            content_type="text/html",
        )

    app.router.add_get("/", home)

    logger.debug("Static routes registered")
