"""URL admission checks for the embedded browser view.

All checks are pure and fail closed: anything that cannot be parsed is
treated as not allowed and never raises.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional
from urllib.parse import urlsplit

from .allow_list import DEFAULT_ALLOW_LIST, AllowListConfig

logger = logging.getLogger(__name__)

INVALID_URL_MESSAGE = "Invalid URL format"
PROTOCOL_MESSAGE = "Only HTTP and HTTPS protocols are allowed"
HOST_MESSAGE = "Navigation is restricted to localhost only"
GENERIC_MESSAGE = "URL is not allowed"


class _Origin(NamedTuple):
    scheme: str
    host: str
    port: Optional[int]


def _parse_origin(url: str) -> _Origin:
    """Split ``url`` into scheme, lower-cased host and explicit port.

    Raises:
        ValueError: If the URL or its port cannot be parsed
    """
    if not isinstance(url, str):
        raise ValueError(f"URL must be a string, got {type(url).__name__}")
    parts = urlsplit(url.strip())
    # .port raises ValueError for non-numeric or out-of-range ports
    port = parts.port
    return _Origin(parts.scheme.lower(), (parts.hostname or "").lower(), port)


class UrlValidator:
    """Classifies URLs against an ``AllowListConfig``."""

    def __init__(self, allow_list: AllowListConfig = DEFAULT_ALLOW_LIST) -> None:
        self.allow_list = allow_list

    def is_url_allowed(self, url: str) -> bool:
        """Check whether ``url`` may be loaded.

        A URL without an explicit port is accepted regardless of the port
        allow-list.
        """
        return self._first_failure(url) is None

    def describe_block_reason(self, url: str) -> str:
        """Explain why ``url`` is blocked.

        Checks run in the order protocol, host, port; the first failing check
        names the reason. A URL that passes every check still gets a generic
        message since callers only ask about URLs they already blocked.
        """
        return self._first_failure(url) or GENERIC_MESSAGE

    def is_same_origin(self, url_a: str, url_b: str) -> bool:
        """Check whether two URLs share scheme, host and port exactly.

        Ports are compared as written: ``http://localhost`` and
        ``http://localhost:80`` are different origins.
        """
        try:
            origin_a = _parse_origin(url_a)
            origin_b = _parse_origin(url_b)
        except ValueError:
            return False
        return origin_a == origin_b

    def _first_failure(self, url: str) -> Optional[str]:
        try:
            origin = _parse_origin(url)
        except ValueError:
            logger.debug("Rejecting unparseable URL %r", url)
            return INVALID_URL_MESSAGE

        if origin.scheme not in self.allow_list.schemes:
            return PROTOCOL_MESSAGE

        if origin.host not in self.allow_list.hosts:
            return HOST_MESSAGE

        if origin.port is not None and origin.port not in self.allow_list.ports:
            allowed = ", ".join(str(p) for p in self.allow_list.ports)
            return f"Port {origin.port} is not allowed. Allowed ports: {allowed}"

        return None


_default_validator = UrlValidator()


def is_url_allowed(url: str) -> bool:
    """Module-level shortcut using the default allow-list."""
    return _default_validator.is_url_allowed(url)


def describe_block_reason(url: str) -> str:
    """Module-level shortcut using the default allow-list."""
    return _default_validator.describe_block_reason(url)


def is_same_origin(url_a: str, url_b: str) -> bool:
    """Module-level shortcut using the default allow-list."""
    return _default_validator.is_same_origin(url_a, url_b)
