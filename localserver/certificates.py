"""Bundled CA certificate loading and the certificate-install hand-off.

Installing the certificate is a platform action outside this package: the
caller supplies an ``opener`` (for example one that launches the system
browser) and we hand it the ``/cert`` URL.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Union

from .errors import ErrorBus
from .exceptions import CertificateUnavailableError

logger = logging.getLogger(__name__)

CERTIFICATE_CONTENT_TYPE = "application/x-x509-ca-cert"

UrlOpener = Callable[[str], Union[Awaitable[object], object]]


async def load_certificate(path: Path) -> bytes:
    """Read the certificate bytes without blocking the event loop.

    Raises:
        CertificateUnavailableError: If the file is missing or unreadable
    """
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise CertificateUnavailableError(path, str(e)) from e


async def open_certificate_install(opener: UrlOpener, cert_url: str, error_bus: ErrorBus) -> bool:
    """Ask the external opener to present ``cert_url`` to the user.

    Failures are reported on ``error_bus`` rather than raised.

    Returns:
        True if the opener accepted the URL
    """
    logger.info("Opening certificate download: %s", cert_url)
    try:
        result = opener(cert_url)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        error_bus.report_unknown(f"Error opening certificate: {e}", details=cert_url, cause=e)
        return False

    if result is False:
        error_bus.report_unknown("Certificate download could not be opened", details=cert_url)
        return False
    return True
