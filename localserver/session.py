"""Session persistence used to resume the server after a relaunch."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

if TYPE_CHECKING:
    from .lifecycle import ServerLifecycleManager

logger = logging.getLogger(__name__)

SESSION_KEY = "server_app_session"
DEFAULT_SESSION_TIMEOUT = timedelta(hours=24)
DEFAULT_SAVE_INTERVAL = 300.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionData(BaseModel):
    """Snapshot of what the application was doing when last saved."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    was_server_running: bool = Field(default=False, alias="wasServerRunning")
    was_webview_visible: bool = Field(default=False, alias="wasWebViewVisible")
    last_url: Optional[str] = Field(default=None, alias="lastUrl")
    timestamp: datetime = Field(default_factory=_utcnow)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> SessionData:
        return cls.model_validate_json(raw)

    def age(self, now: Optional[datetime] = None) -> timedelta:
        now = now or _utcnow()
        timestamp = self.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return now - timestamp


class SessionStore(Protocol):
    """Key/value storage for serialized sessions."""

    async def load(self, key: str) -> Optional[str]: ...

    async def save(self, key: str, value: Optional[str]) -> None: ...


class InMemorySessionStore:
    """Process-local ``SessionStore``; nothing survives a restart."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    async def load(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def save(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value


class SessionManager:
    """Saves, expires and restores ``SessionData``.

    Storage failures are logged and never raised; a session that cannot be
    loaded is treated as absent.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        timeout: timedelta = DEFAULT_SESSION_TIMEOUT,
        save_interval: float = DEFAULT_SAVE_INTERVAL,
    ) -> None:
        self.store: SessionStore = store if store is not None else InMemorySessionStore()
        self.timeout = timeout
        self.save_interval = save_interval
        self.logger = logging.getLogger(f"{__name__}.SessionManager")
        self._current: Optional[SessionData] = None
        self._save_task: Optional[asyncio.Task[None]] = None

    @property
    def current_session(self) -> Optional[SessionData]:
        return self._current

    async def initialize(self) -> None:
        """Load the stored session and start periodic saving."""
        await self._load_session()
        self._start_periodic_save()

    async def save_session(
        self,
        is_server_running: bool,
        is_webview_visible: bool,
        current_url: Optional[str] = None,
    ) -> SessionData:
        self._current = SessionData(
            was_server_running=is_server_running,
            was_webview_visible=is_webview_visible,
            last_url=current_url,
        )
        await self._persist_session()
        return self._current

    async def restore_session(self) -> Optional[SessionData]:
        """Return the current session unless it has expired.

        An expired session is cleared from the store.
        """
        if self._current is None:
            return None
        if self._current.age() > self.timeout:
            self.logger.info("Stored session expired; discarding it")
            await self.clear_session()
            return None
        return self._current

    async def clear_session(self) -> None:
        self._current = None
        await self._persist_session()

    def should_restore_session(self) -> bool:
        if self._current is None:
            return False
        return self._current.age() <= self.timeout

    async def auto_restore_server_state(self, manager: ServerLifecycleManager) -> bool:
        """Start the server if the restorable session says it was running.

        Returns:
            Result of ``start_server()``, or False when nothing was restored
        """
        session = await self.restore_session()
        if session is None or not session.was_server_running:
            return False

        self.logger.info("Auto-restoring server state...")
        try:
            success = await manager.start_server()
        except Exception:
            self.logger.exception("Failed to restore server state")
            return False

        if success:
            self.logger.info("Server state restored successfully")
        return success

    async def close(self) -> None:
        task = self._save_task
        self._save_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _load_session(self) -> None:
        self.logger.debug("Loading session data...")
        try:
            raw = await self.store.load(SESSION_KEY)
        except Exception:
            self.logger.exception("Failed to load session")
            return
        if raw is None:
            return
        try:
            self._current = SessionData.from_json(raw)
        except ValidationError as e:
            self.logger.warning("Ignoring unreadable session data: %s", e)

    async def _persist_session(self) -> None:
        self.logger.debug("Saving session data...")
        payload = self._current.to_json() if self._current is not None else None
        try:
            await self.store.save(SESSION_KEY, payload)
        except Exception:
            self.logger.exception("Failed to save session")

    def _start_periodic_save(self) -> None:
        if self._save_task is not None and not self._save_task.done():
            self._save_task.cancel()
        self._save_task = asyncio.create_task(
            self._periodic_save_loop(), name="localserver-session-save"
        )

    async def _periodic_save_loop(self) -> None:
        while True:
            await asyncio.sleep(self.save_interval)
            if self._current is not None:
                await self._persist_session()
