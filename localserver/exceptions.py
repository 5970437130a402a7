"""Exception hierarchy for the localserver package.

Lifecycle operations never let these escape to their callers; they are raised
internally and converted into ``AppError`` values at the operation boundary.
"""

from __future__ import annotations

from pathlib import Path


class LocalServerError(Exception):
    """Base exception for all localserver errors."""


class CertificateUnavailableError(LocalServerError):
    """The bundled certificate file could not be read.

    The ``/cert`` route maps this to an HTTP 500 plain-text response.
    """

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize CertificateUnavailableError.

        Args:
            path: Certificate path that failed to load
            reason: Underlying error text
        """
        super().__init__(f"Cannot read certificate {path}: {reason}")
        self.path = path
        self.reason = reason


class ChannelClosedError(LocalServerError):
    """Raised when subscribing to a broadcast channel that was already closed."""

    def __init__(self, channel_name: str) -> None:
        super().__init__(f"Broadcast channel '{channel_name}' is closed")
        self.channel_name = channel_name
