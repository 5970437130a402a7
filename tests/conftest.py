"""Shared fixtures for localserver tests."""

from collections.abc import AsyncIterator, Generator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from localserver.core.settings import ServerSettings
from localserver.errors import ErrorBus
from localserver.lifecycle import ServerLifecycleManager

_CONFIG_ENV_VARS = (
    "LOCALSERVER_HOST",
    "LOCALSERVER_BIND",
    "LOCALSERVER_PORT",
    "LOCALSERVER_HEALTH_INTERVAL",
    "LOCALSERVER_HEALTH_TIMEOUT",
    "LOCALSERVER_RESTART_DELAY",
    "LOCALSERVER_CERT_PATH",
    "LOCALSERVER_DEBUG",
    "LOCALSERVER_LOG_LEVEL",
)


def pytest_configure(config: Any) -> None:
    config.addinivalue_line("markers", "unit: fast isolated unit tests")
    config.addinivalue_line("markers", "integration: tests that bind real loopback sockets")


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Keep LOCALSERVER_* variables from the host environment out of tests."""
    for name in _CONFIG_ENV_VARS:
        # setenv first so teardown also removes values written by load_env_file()
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    yield


@pytest.fixture
def certificate_file(tmp_path: Path) -> Path:
    """Write a small PEM-looking certificate file and return its path."""
    path = tmp_path / "localhost.crt"
    path.write_bytes(b"-----BEGIN CERTIFICATE-----\nTUlJQ2xvY2FsaG9zdA==\n-----END CERTIFICATE-----\n")
    return path


@pytest.fixture
def test_settings(certificate_file: Path) -> ServerSettings:
    """Settings bound to an OS-assigned loopback port with fast timings.

    The health-check interval is long so background probes never interfere
    unless a test asks for them.
    """
    return ServerSettings(
        port=0,
        health_check_interval=60.0,
        health_check_timeout=2.0,
        restart_delay=0.0,
        certificate_path=certificate_file,
    )


@pytest.fixture
def error_bus() -> Generator[ErrorBus, Any, None]:
    bus = ErrorBus()
    yield bus
    bus.close()


@pytest_asyncio.fixture
async def manager(
    test_settings: ServerSettings, error_bus: ErrorBus
) -> AsyncIterator[ServerLifecycleManager]:
    """Lifecycle manager that is always stopped and closed after the test."""
    server_manager = ServerLifecycleManager(test_settings, error_bus)
    yield server_manager
    await server_manager.close()
