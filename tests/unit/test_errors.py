"""Unit tests for localserver.errors."""

import logging
from typing import Any

import pytest

from localserver.errors import (
    DEFAULT_SEVERITY,
    AppError,
    ErrorBus,
    ErrorKind,
    Severity,
    friendly_message,
    suggested_actions,
)

pytestmark = pytest.mark.unit


def _error(kind: ErrorKind, message: str = "boom") -> AppError:
    return AppError(kind=kind, severity=DEFAULT_SEVERITY[kind], message=message)


class TestSeverity:
    def test_severity_when_compared_then_totally_ordered(self) -> None:
        assert Severity.LOW < Severity.MEDIUM < Severity.HIGH < Severity.CRITICAL
        assert max(Severity) is Severity.CRITICAL
        assert sorted([Severity.HIGH, Severity.LOW]) == [Severity.LOW, Severity.HIGH]

    def test_severity_when_str_then_label(self) -> None:
        assert str(Severity.HIGH) == "high"


class TestPresentation:
    @pytest.mark.parametrize("kind", list(ErrorKind))
    def test_every_kind_when_presented_then_has_message_and_three_actions(
        self, kind: ErrorKind
    ) -> None:
        error = _error(kind)

        assert friendly_message(error)
        actions = suggested_actions(error)
        assert len(actions) == 3
        assert all(actions)

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (ErrorKind.SERVER_STARTUP, "Failed to start server: boom"),
            (ErrorKind.SERVER_CONNECTION, "Server connection issue: boom"),
            (ErrorKind.WEBVIEW_LOAD, "Failed to load page: boom"),
            (ErrorKind.NETWORK_TIMEOUT, "Network timeout: boom"),
            (ErrorKind.PORT_IN_USE, "boom"),
            (ErrorKind.UNKNOWN, "An unexpected error occurred: boom"),
        ],
    )
    def test_friendly_message_when_kind_then_prefixed(self, kind: ErrorKind, expected: str) -> None:
        assert friendly_message(_error(kind)) == expected

    def test_suggested_actions_when_port_in_use_then_port_substituted(self) -> None:
        actions = suggested_actions(_error(ErrorKind.PORT_IN_USE), port=8080)

        assert actions[0] == "Stop other applications using port 8080"

    def test_suggested_actions_when_startup_then_default_port_mentioned(self) -> None:
        actions = suggested_actions(_error(ErrorKind.SERVER_STARTUP))

        assert actions == [
            "Check if port 3000 is available",
            "Restart the application",
            "Check network permissions",
        ]


class TestAppError:
    def test_from_exception_when_cause_given_then_trace_captured(self) -> None:
        try:
            raise ValueError("bad value")
        except ValueError as e:
            error = AppError.from_exception(ErrorKind.UNKNOWN, Severity.LOW, "failed", e)

        assert error.cause is not None
        assert error.trace is not None
        assert "ValueError: bad value" in error.trace

    def test_app_error_when_created_then_immutable(self) -> None:
        error = _error(ErrorKind.UNKNOWN)

        with pytest.raises(AttributeError):
            error.message = "changed"  # type: ignore[misc]


class TestErrorBus:
    def test_report_when_subscribed_then_delivered_in_order(self) -> None:
        bus = ErrorBus()
        sub = bus.subscribe()

        bus.report_server_startup("first")
        bus.report_network_timeout("second")

        errors = sub.drain()
        assert [e.kind for e in errors] == [ErrorKind.SERVER_STARTUP, ErrorKind.NETWORK_TIMEOUT]
        assert [e.message for e in errors] == ["first", "second"]

    @pytest.mark.parametrize(
        ("method", "kind", "severity"),
        [
            ("report_server_startup", ErrorKind.SERVER_STARTUP, Severity.HIGH),
            ("report_server_connection", ErrorKind.SERVER_CONNECTION, Severity.MEDIUM),
            ("report_webview_load", ErrorKind.WEBVIEW_LOAD, Severity.MEDIUM),
            ("report_network_timeout", ErrorKind.NETWORK_TIMEOUT, Severity.MEDIUM),
            ("report_unknown", ErrorKind.UNKNOWN, Severity.MEDIUM),
        ],
    )
    def test_report_helpers_when_called_then_bind_kind_and_severity(
        self, method: str, kind: ErrorKind, severity: Severity
    ) -> None:
        bus = ErrorBus()

        error = getattr(bus, method)("message", details="details")

        assert error.kind is kind
        assert error.severity is severity
        assert error.details == "details"

    def test_report_port_in_use_when_called_then_message_names_port(self) -> None:
        bus = ErrorBus()

        error = bus.report_port_in_use(3000)

        assert error.kind is ErrorKind.PORT_IN_USE
        assert error.severity is Severity.HIGH
        assert error.message == "Port 3000 is already in use"
        assert friendly_message(error) == "Port 3000 is already in use"

    def test_report_when_no_subscribers_then_does_not_raise(self) -> None:
        ErrorBus().report_unknown("nobody listening")

    def test_report_when_listener_raises_then_other_subscribers_still_receive(self) -> None:
        bus = ErrorBus()
        sub = bus.subscribe()

        def broken(_error: AppError) -> None:
            raise RuntimeError("listener failure")

        bus.add_listener(broken)
        bus.report_unknown("still delivered")

        assert [e.message for e in sub.drain()] == ["still delivered"]

    def test_report_when_closed_then_dropped_silently(self) -> None:
        bus = ErrorBus()
        sub = bus.subscribe()
        bus.close()

        bus.report_unknown("late")

        assert bus.closed is True
        assert sub.drain() == []

    def test_report_when_severity_high_then_logged_at_error(self, caplog: Any) -> None:
        bus = ErrorBus()

        with caplog.at_level(logging.DEBUG, logger="localserver.errors"):
            bus.report_server_startup("cannot bind", details="errno 13")

        record = next(r for r in caplog.records if "cannot bind" in r.getMessage())
        assert record.levelno == logging.ERROR
        assert "errno 13" in record.getMessage()
