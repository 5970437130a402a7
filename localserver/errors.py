"""Typed application errors and the error broadcast bus.

Producers (the lifecycle manager, the embedded view collaborator) report
``AppError`` values; presentation code subscribes to the bus and renders them
with ``friendly_message()`` and ``suggested_actions()``.

Classes:
    ErrorKind: Closed set of error categories
    Severity: Totally ordered presentation severity
    AppError: Immutable error value
    ErrorBus: Broadcast channel plus convenience constructors

Example:
    >>> bus = ErrorBus()
    >>> sub = bus.subscribe()
    >>> _ = bus.report_port_in_use(3000)
    >>> error = sub.drain()[0]
    >>> friendly_message(error)
    'Port 3000 is already in use'
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import total_ordering
from typing import Optional

from .core.broadcast import DEFAULT_BUFFER_SIZE, BroadcastChannel, Subscription
from .core.settings import DEFAULT_PORT

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Error categories reported through the ErrorBus."""

    SERVER_STARTUP = "server_startup"
    SERVER_CONNECTION = "server_connection"
    WEBVIEW_LOAD = "webview_load"
    NETWORK_TIMEOUT = "network_timeout"
    PORT_IN_USE = "port_in_use"
    UNKNOWN = "unknown"


@total_ordering
class Severity(Enum):
    """Error severity levels, ordered LOW < MEDIUM < HIGH < CRITICAL.

    Severity only selects the log level and presentation; it never changes how
    an error propagates.
    """

    LOW = ("low", 1)
    MEDIUM = ("medium", 2)
    HIGH = ("high", 3)
    CRITICAL = ("critical", 4)

    def __init__(self, label: str, priority: int) -> None:
        self.label = label
        self.priority = priority

    def __str__(self) -> str:
        return self.label

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.priority < other.priority


_LOG_LEVELS: Mapping[Severity, int] = {
    Severity.LOW: logging.INFO,
    Severity.MEDIUM: logging.WARNING,
    Severity.HIGH: logging.ERROR,
    Severity.CRITICAL: logging.CRITICAL,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AppError:
    """Immutable description of a failure.

    Attributes:
        kind: Error category
        severity: Presentation severity
        message: Short human-readable message
        details: Optional longer explanation or underlying error text
        cause: Original exception, when one was caught
        trace: Formatted traceback of ``cause``
        created_at: UTC creation time
    """

    kind: ErrorKind
    severity: Severity
    message: str
    details: Optional[str] = None
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)
    trace: Optional[str] = field(default=None, compare=False, repr=False)
    created_at: datetime = field(default_factory=_utcnow, compare=False)

    @classmethod
    def from_exception(
        cls,
        kind: ErrorKind,
        severity: Severity,
        message: str,
        exc: Optional[BaseException] = None,
        details: Optional[str] = None,
    ) -> AppError:
        """Build an error, capturing the traceback of ``exc`` when given."""
        trace = None
        if exc is not None:
            trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(
            kind=kind,
            severity=severity,
            message=message,
            details=details,
            cause=exc,
            trace=trace,
        )


# Default severities bound by the convenience constructors.
DEFAULT_SEVERITY: Mapping[ErrorKind, Severity] = {
    ErrorKind.SERVER_STARTUP: Severity.HIGH,
    ErrorKind.SERVER_CONNECTION: Severity.MEDIUM,
    ErrorKind.WEBVIEW_LOAD: Severity.MEDIUM,
    ErrorKind.NETWORK_TIMEOUT: Severity.MEDIUM,
    ErrorKind.PORT_IN_USE: Severity.HIGH,
    ErrorKind.UNKNOWN: Severity.MEDIUM,
}

_FRIENDLY_PREFIX: Mapping[ErrorKind, Optional[str]] = {
    ErrorKind.SERVER_STARTUP: "Failed to start server",
    ErrorKind.SERVER_CONNECTION: "Server connection issue",
    ErrorKind.WEBVIEW_LOAD: "Failed to load page",
    ErrorKind.NETWORK_TIMEOUT: "Network timeout",
    ErrorKind.PORT_IN_USE: None,
    ErrorKind.UNKNOWN: "An unexpected error occurred",
}

_SUGGESTED_ACTIONS: Mapping[ErrorKind, tuple[str, ...]] = {
    ErrorKind.SERVER_STARTUP: (
        "Check if port {port} is available",
        "Restart the application",
        "Check network permissions",
    ),
    ErrorKind.SERVER_CONNECTION: (
        "Check your internet connection",
        "Restart the server",
        "Try again in a few moments",
    ),
    ErrorKind.WEBVIEW_LOAD: (
        "Check if server is running",
        "Reload the page",
        "Check network connection",
    ),
    ErrorKind.NETWORK_TIMEOUT: (
        "Check your internet connection",
        "Try again later",
        "Restart the application",
    ),
    ErrorKind.PORT_IN_USE: (
        "Stop other applications using port {port}",
        "Restart your device",
        "Try a different port",
    ),
    ErrorKind.UNKNOWN: (
        "Restart the application",
        "Check system resources",
        "Contact support if issue persists",
    ),
}


def friendly_message(error: AppError) -> str:
    """Get the user-facing message for ``error``."""
    prefix = _FRIENDLY_PREFIX[error.kind]
    if prefix is None:
        return error.message
    return f"{prefix}: {error.message}"


def suggested_actions(error: AppError, port: int = DEFAULT_PORT) -> list[str]:
    """Get ordered remediation steps for ``error``.

    Args:
        error: Error to describe
        port: Server port substituted into port-specific advice
    """
    return [action.format(port=port) for action in _SUGGESTED_ACTIONS[error.kind]]


class ErrorBus:
    """Broadcasts ``AppError`` values to any number of subscribers.

    ``report()`` never raises: delivery uses a drop-oldest buffer per
    subscriber and listener exceptions are logged and ignored.
    """

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self._channel: BroadcastChannel[AppError] = BroadcastChannel("errors", buffer_size)
        self.logger = logging.getLogger(f"{__name__}.ErrorBus")

    @property
    def closed(self) -> bool:
        return self._channel.closed

    def subscribe(self) -> Subscription[AppError]:
        return self._channel.subscribe()

    def add_listener(self, callback: Callable[[AppError], object]) -> Callable[[], None]:
        return self._channel.add_listener(callback)

    def report(self, error: AppError) -> None:
        """Log ``error`` at a severity-derived level and broadcast it."""
        try:
            self.logger.log(
                _LOG_LEVELS[error.severity],
                "[%s] %s%s",
                error.kind.value,
                error.message,
                f" ({error.details})" if error.details else "",
            )
            if error.trace:
                self.logger.debug("Traceback for %s error:\n%s", error.kind.value, error.trace)
            self._channel.publish(error)
        except Exception:
            logger.exception("Failed to report %r", error)

    def _report(
        self,
        kind: ErrorKind,
        message: str,
        details: Optional[str],
        cause: Optional[BaseException],
    ) -> AppError:
        error = AppError.from_exception(kind, DEFAULT_SEVERITY[kind], message, cause, details)
        self.report(error)
        return error

    def report_server_startup(
        self, message: str, details: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> AppError:
        return self._report(ErrorKind.SERVER_STARTUP, message, details, cause)

    def report_server_connection(
        self, message: str, details: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> AppError:
        return self._report(ErrorKind.SERVER_CONNECTION, message, details, cause)

    def report_webview_load(
        self, message: str, details: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> AppError:
        return self._report(ErrorKind.WEBVIEW_LOAD, message, details, cause)

    def report_network_timeout(
        self, message: str, details: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> AppError:
        return self._report(ErrorKind.NETWORK_TIMEOUT, message, details, cause)

    def report_port_in_use(
        self, port: int, details: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> AppError:
        """Report that ``port`` could not be bound because it is occupied."""
        return self._report(
            ErrorKind.PORT_IN_USE,
            f"Port {port} is already in use",
            details
            or f"Another application is using port {port}. "
            "Please stop it or choose a different port.",
            cause,
        )

    def report_unknown(
        self, message: str, details: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> AppError:
        return self._report(ErrorKind.UNKNOWN, message, details, cause)

    def close(self) -> None:
        """Close the bus; later reports are dropped. Idempotent."""
        self._channel.close()
