"""Lifecycle management for the embedded local control server.

The manager exclusively owns the server state, the aiohttp listener and the
periodic health-check task. Every transition is published on the status
stream in the order it happens; diagnostic lines go to the log stream and
failures go to the ``ErrorBus``. No lifecycle operation raises to its caller:
the boolean result is the only synchronous failure signal.

Classes:
    ServerState: Lifecycle states
    ServerStatus: Snapshot for status displays
    ServerLifecycleManager: Start/stop/restart and health supervision

Example:
    >>> manager = ServerLifecycleManager(ServerSettings(), ErrorBus())
    >>> statuses = manager.subscribe_status()
    >>> await manager.start_server()
    True
    >>> statuses.drain()
    [<ServerState.STARTING: 'starting'>, <ServerState.RUNNING: 'running'>]
    >>> await manager.stop_server()
    True
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from aiohttp import web

from .api.server import make_app
from .core.broadcast import BroadcastChannel, Subscription
from .core.health_tracker import HealthTracker
from .core.http_client import probe_status
from .core.settings import ServerSettings
from .errors import ErrorBus

_ADDRESS_IN_USE_ERRNOS = frozenset(
    code for code in (errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", None)) if code is not None
)


class ServerState(str, Enum):
    """Server lifecycle states.

    Attributes:
        STOPPED: No listener bound (initial state)
        STARTING: Listener is being bound
        RUNNING: Listener bound and health checks active
        STOPPING: Listener is being force-closed
        ERROR: Last start, stop or health check failed
    """

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    ERROR = "error"


@dataclass
class ServerStatus:
    """Snapshot of the server for status displays."""

    state: ServerState
    url: str
    port: int
    uptime_seconds: Optional[int]
    last_health_check: Optional[datetime]
    last_health_ok: Optional[bool]
    health_check_count: int
    failed_health_check_count: int


def is_address_in_use(exc: OSError) -> bool:
    """Check whether a bind failure means the port is already occupied."""
    if exc.errno in _ADDRESS_IN_USE_ERRNOS:
        return True
    return "address already in use" in str(exc).lower()


def _probe_host(bind_address: str) -> str:
    if bind_address in ("", "0.0.0.0"):  # nosec B104
        return "127.0.0.1"
    if bind_address == "::":
        return "[::1]"
    if ":" in bind_address:
        return f"[{bind_address}]"
    return bind_address


class ServerLifecycleManager:
    """Owns the embedded HTTP listener, its state machine and health supervision.

    States move ``STOPPED -> STARTING -> RUNNING -> STOPPING -> STOPPED``; any
    failure moves to ``ERROR``, from which a fresh ``start_server()`` is
    accepted. Duplicate calls in the direction already in flight return True
    immediately; opposite-direction calls are serialized.

    Invariants:
        - at most one listener exists at a time
        - state is RUNNING iff a listener is bound
        - the health-check task is alive iff state is RUNNING
    """

    def __init__(self, settings: ServerSettings, error_bus: ErrorBus) -> None:
        """Initialize the manager in the STOPPED state.

        Args:
            settings: Server settings
            error_bus: Bus that receives every lifecycle failure
        """
        self.settings = settings
        self.error_bus = error_bus
        self.logger = logging.getLogger(f"{__name__}.ServerLifecycleManager")

        self._state = ServerState.STOPPED
        self._runner: Optional[web.AppRunner] = None
        self._bound_port: Optional[int] = None
        self._health_task: Optional[asyncio.Task[None]] = None
        self._health_tracker = HealthTracker()
        self._transition_lock = asyncio.Lock()
        self._closed = False

        self._status_channel: BroadcastChannel[ServerState] = BroadcastChannel(
            "status", settings.event_buffer_size
        )
        self._log_channel: BroadcastChannel[str] = BroadcastChannel(
            "log", settings.event_buffer_size
        )

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def host(self) -> str:
        return self.settings.host

    @property
    def port(self) -> int:
        """Bound port while a listener exists, otherwise the configured port."""
        if self._bound_port is not None:
            return self._bound_port
        return self.settings.port

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def certificate_url(self) -> str:
        return f"{self.url}/cert"

    @property
    def has_listener(self) -> bool:
        return self._runner is not None

    @property
    def health_check_active(self) -> bool:
        return self._health_task is not None and not self._health_task.done()

    def subscribe_status(self) -> Subscription[ServerState]:
        return self._status_channel.subscribe()

    def subscribe_log(self) -> Subscription[str]:
        return self._log_channel.subscribe()

    def add_status_listener(self, callback: Callable[[ServerState], object]) -> Callable[[], None]:
        return self._status_channel.add_listener(callback)

    def add_log_listener(self, callback: Callable[[str], object]) -> Callable[[], None]:
        return self._log_channel.add_listener(callback)

    async def start_server(self) -> bool:
        """Bind the listener and begin health supervision.

        Returns:
            True if the server is running (or a start is already in flight),
            False if binding failed; the failure is reported on the ErrorBus
        """
        if self._state in (ServerState.RUNNING, ServerState.STARTING):
            self._log("Server is already running")
            return True

        async with self._transition_lock:
            if self._state in (ServerState.RUNNING, ServerState.STARTING):
                self._log("Server is already running")
                return True

            self._update_status(ServerState.STARTING)
            self._log(f"Starting server on {self.url}...")

            runner: Optional[web.AppRunner] = None
            try:
                app = make_app(self.settings, lambda: self.port, self._log)
                runner = web.AppRunner(app, shutdown_timeout=0.0, access_log=None)
                await runner.setup()
                site = web.TCPSite(runner, host=self.settings.bind_address, port=self.settings.port)
                await site.start()
            except OSError as e:
                await self._discard_runner(runner)
                if is_address_in_use(e):
                    self.error_bus.report_port_in_use(self.settings.port, details=str(e), cause=e)
                else:
                    self.error_bus.report_server_startup(
                        f"Socket error: {e.strerror or e}", details=str(e), cause=e
                    )
                self._update_status(ServerState.ERROR)
                return False
            except Exception as e:
                await self._discard_runner(runner)
                self.error_bus.report_server_startup(
                    f"Failed to start server: {e}", details=repr(e), cause=e
                )
                self._update_status(ServerState.ERROR)
                return False

            self._runner = runner
            self._bound_port = self._read_bound_port(runner)
            self._health_tracker.record_started()
            self._update_status(ServerState.RUNNING)
            self._log(f"Server started successfully on {self.url}")
            self._start_health_check()
            return True

    async def stop_server(self) -> bool:
        """Cancel health checks, then force-close the listener.

        In-flight requests are not drained; their responses are dropped.

        Returns:
            True if the server is stopped (or a stop is already in flight),
            False if closing failed; the failure is reported on the ErrorBus
        """
        if self._state in (ServerState.STOPPED, ServerState.STOPPING):
            return True

        async with self._transition_lock:
            if self._state in (ServerState.STOPPED, ServerState.STOPPING):
                return True

            try:
                self._update_status(ServerState.STOPPING)
                self._log("Stopping server...")
                await self._stop_health_check()
                await self._release_listener()
                self._update_status(ServerState.STOPPED)
                self._log("Server stopped successfully")
                return True
            except Exception as e:
                self.error_bus.report_server_startup(
                    f"Failed to stop server: {e}", details=repr(e), cause=e
                )
                self._update_status(ServerState.ERROR)
                return False

    async def restart_server(self) -> bool:
        """Stop, wait ``restart_delay`` for the OS to release the socket, then start.

        Returns:
            Result of the start attempt
        """
        self._log("Restarting server...")
        await self.stop_server()
        await asyncio.sleep(self.settings.restart_delay)
        return await self.start_server()

    async def is_server_healthy(self) -> bool:
        """Probe ``/api/status`` on the running listener.

        Returns:
            True iff the server is RUNNING and answered HTTP 200
        """
        if self._state is not ServerState.RUNNING or self._runner is None:
            return False

        try:
            healthy = await probe_status(self._probe_url(), self.settings.health_check_timeout)
        except Exception:
            self.logger.exception("Health check failed")
            healthy = False

        self._health_tracker.record_probe(healthy)
        return healthy

    def get_status(self) -> ServerStatus:
        snapshot = self._health_tracker.snapshot()
        return ServerStatus(
            state=self._state,
            url=self.url,
            port=self.port,
            uptime_seconds=snapshot.uptime_seconds,
            last_health_check=snapshot.last_probe_at,
            last_health_ok=snapshot.last_probe_ok,
            health_check_count=snapshot.probe_count,
            failed_health_check_count=snapshot.failed_probe_count,
        )

    async def close(self) -> None:
        """Stop the server and close the status and log streams. Idempotent."""
        if self._closed:
            return
        self._closed = True
        await self.stop_server()
        self._status_channel.close()
        self._log_channel.close()

    def _update_status(self, new_state: ServerState) -> None:
        self.logger.debug("State %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        self._status_channel.publish(new_state)

    def _log(self, message: str) -> None:
        self.logger.info(message)
        self._log_channel.publish(message)

    def _probe_url(self) -> str:
        return f"http://{_probe_host(self.settings.bind_address)}:{self.port}/api/status"

    def _read_bound_port(self, runner: web.AppRunner) -> int:
        for address in runner.addresses:
            if isinstance(address, tuple) and len(address) >= 2:
                return int(address[1])
        return self.settings.port

    def _start_health_check(self) -> None:
        if self._health_task is not None and not self._health_task.done():
            self._health_task.cancel()
        self._health_task = asyncio.create_task(
            self._health_check_loop(), name="localserver-health-check"
        )

    async def _stop_health_check(self) -> None:
        task = self._health_task
        self._health_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _health_check_loop(self) -> None:
        """Probe every ``health_check_interval`` seconds; the first failure is terminal."""
        interval = self.settings.health_check_interval
        while True:
            await asyncio.sleep(interval)
            if self._state is not ServerState.RUNNING:
                return

            if await self.is_server_healthy():
                continue

            async with self._transition_lock:
                if self._state is not ServerState.RUNNING:
                    return
                # Detach first so stop_server() never awaits this task from inside it.
                self._health_task = None
                self.error_bus.report_server_connection(
                    "Server health check failed",
                    details=f"GET {self._probe_url()} did not return HTTP 200",
                )
                self._update_status(ServerState.ERROR)
                self._log("Health check failed; server stopped")
                try:
                    await self._release_listener()
                except Exception:
                    self.logger.exception("Error closing listener after failed health check")
            return

    async def _release_listener(self) -> None:
        runner = self._runner
        self._runner = None
        self._bound_port = None
        self._health_tracker.record_stopped()
        if runner is not None:
            await runner.cleanup()

    async def _discard_runner(self, runner: Optional[web.AppRunner]) -> None:
        if runner is None:
            return
        try:
            await runner.cleanup()
        except Exception:
            self.logger.debug("Error cleaning up runner after failed start", exc_info=True)
