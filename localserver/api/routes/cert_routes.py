"""Certificate download route: GET /cert."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from aiohttp import web

from ...certificates import CERTIFICATE_CONTENT_TYPE, load_certificate
from ...core.settings import CERTIFICATE_DOWNLOAD_NAME
from ...exceptions import CertificateUnavailableError

logger = logging.getLogger(__name__)


def register_cert_routes(
    app: web.Application,
    certificate_path: Path,
    log: Callable[[str], None] | None = None,
) -> None:
    """Register the certificate download route.

    Args:
        app: aiohttp web application
        certificate_path: Bundled CA certificate to serve
        log: Optional sink for diagnostic lines (the lifecycle log stream)
    """

    async def serve_certificate(_request: web.Request) -> web.Response:
        try:
            data = await load_certificate(certificate_path)
        except CertificateUnavailableError as e:
            logger.error("Error serving certificate: %s", e)
            if log is not None:
                log(f"Error serving certificate: {e}")
            return web.Response(
                text="Error loading certificate file",
                status=500,
                content_type="text/plain",
            )

        return web.Response(
            body=data,
            content_type=CERTIFICATE_CONTENT_TYPE,
            headers={
                "Content-Disposition": f'attachment; filename="{CERTIFICATE_DOWNLOAD_NAME}"',
                "Cache-Control": "no-cache",
            },
        )

    app.router.add_get("/cert", serve_certificate)

    logger.debug("Certificate route registered for %s", certificate_path)
