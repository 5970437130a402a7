"""Composition root: wires settings, ErrorBus, lifecycle and session managers."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
from typing import Optional, TextIO

from .core.settings import ServerSettings
from .errors import AppError, ErrorBus, friendly_message, suggested_actions
from .lifecycle import ServerLifecycleManager, ServerState
from .session import SessionManager, SessionStore

logger = logging.getLogger(__name__)


def format_error(error: AppError, port: int) -> str:
    """Render an error with its remediation steps for console output."""
    lines = [f"[{error.severity}] {friendly_message(error)}"]
    if error.details:
        lines.append(f"  {error.details}")
    lines.extend(f"  - {action}" for action in suggested_actions(error, port))
    return "\n".join(lines)


async def serve(
    settings: ServerSettings,
    external_stop_event: Optional[asyncio.Event] = None,
    session_store: Optional[SessionStore] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Run the server until signalled to stop.

    Args:
        settings: Server settings
        external_stop_event: Optional event to signal shutdown. If provided,
            signal handlers are NOT registered (caller owns signal handling).
        session_store: Storage for the resumable session
        out: Stream for user-facing output (defaults to stderr)

    Returns:
        0 after a clean stop, 1 if the server failed to start or errored
    """
    out = out or sys.stderr
    error_bus = ErrorBus(settings.event_buffer_size)
    manager = ServerLifecycleManager(settings, error_bus)
    sessions = SessionManager(
        session_store,
        timeout=settings.session_timeout,
        save_interval=settings.session_save_interval,
    )
    stop_event = external_stop_event or asyncio.Event()
    failed = False

    def _on_error(error: AppError) -> None:
        print(format_error(error, manager.port), file=out)

    def _on_status(state: ServerState) -> None:
        nonlocal failed
        if state is ServerState.ERROR:
            failed = True
            stop_event.set()

    error_bus.add_listener(_on_error)
    manager.add_status_listener(_on_status)

    try:
        await sessions.initialize()
        session = await sessions.restore_session()
        if session is not None and session.was_server_running:
            started = await sessions.auto_restore_server_state(manager)
        else:
            started = await manager.start_server()
        if not started:
            return 1

        print(f"Serving on {manager.url}", file=out)
        print(f"CA certificate: {manager.certificate_url}", file=out)

        if external_stop_event is None:
            loop = asyncio.get_running_loop()

            def _on_signal() -> None:
                logger.info("Shutdown signal received")
                stop_event.set()

            for sig in (signal.SIGINT, signal.SIGTERM):
                with contextlib.suppress(NotImplementedError):
                    loop.add_signal_handler(sig, _on_signal)
        else:
            logger.debug("Using external stop event - skipping signal handler registration")

        await stop_event.wait()
        logger.info("Stop event received, shutting down")

        await sessions.save_session(
            is_server_running=manager.state is ServerState.RUNNING,
            is_webview_visible=False,
            current_url=manager.url,
        )
    finally:
        await manager.close()
        await sessions.close()
        error_bus.close()
        logger.info("Server shutdown complete")

    return 1 if failed else 0
