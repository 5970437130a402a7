"""Health probe bookkeeping for the localserver lifecycle manager."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class HealthSnapshot:
    """Point-in-time view of listener health."""

    uptime_seconds: Optional[int]
    last_probe_at: Optional[datetime]
    last_probe_ok: Optional[bool]
    probe_count: int
    failed_probe_count: int


class HealthTracker:
    """Tracks listener uptime and health-check outcomes.

    The tracker is reset whenever the listener is (re)bound so uptime and
    counters describe the current run only.
    """

    def __init__(self) -> None:
        """Initialize health tracker with no active run."""
        self._started_at: Optional[float] = None
        self._last_probe_at: Optional[float] = None
        self._last_probe_ok: Optional[bool] = None
        self._probe_count = 0
        self._failed_probe_count = 0

    def record_started(self) -> None:
        """Mark the start of a new run and clear probe history."""
        self._started_at = time.time()
        self._last_probe_at = None
        self._last_probe_ok = None
        self._probe_count = 0
        self._failed_probe_count = 0

    def record_stopped(self) -> None:
        """Mark that no listener is bound any more."""
        self._started_at = None

    def record_probe(self, ok: bool) -> None:
        """Record a health-check result.

        Args:
            ok: Whether the probe reported the listener healthy
        """
        self._last_probe_at = time.time()
        self._last_probe_ok = ok
        self._probe_count += 1
        if not ok:
            self._failed_probe_count += 1

    def get_uptime_seconds(self) -> Optional[int]:
        """Get seconds since the current run started, or None when not running."""
        if self._started_at is None:
            return None
        return int(time.time() - self._started_at)

    def snapshot(self) -> HealthSnapshot:
        last_probe_at = None
        if self._last_probe_at is not None:
            last_probe_at = datetime.fromtimestamp(self._last_probe_at, tz=timezone.utc)

        return HealthSnapshot(
            uptime_seconds=self.get_uptime_seconds(),
            last_probe_at=last_probe_at,
            last_probe_ok=self._last_probe_ok,
            probe_count=self._probe_count,
            failed_probe_count=self._failed_probe_count,
        )
