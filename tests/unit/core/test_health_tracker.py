"""Unit tests for localserver.core.health_tracker."""

from unittest.mock import patch

import pytest

from localserver.core.health_tracker import HealthTracker

pytestmark = pytest.mark.unit


class TestHealthTracker:
    def test_snapshot_when_never_started_then_empty(self) -> None:
        snapshot = HealthTracker().snapshot()

        assert snapshot.uptime_seconds is None
        assert snapshot.last_probe_at is None
        assert snapshot.last_probe_ok is None
        assert snapshot.probe_count == 0

    def test_uptime_when_started_then_counts_seconds(self) -> None:
        tracker = HealthTracker()
        with patch("localserver.core.health_tracker.time.time", return_value=1000.0):
            tracker.record_started()
        with patch("localserver.core.health_tracker.time.time", return_value=1042.5):
            assert tracker.get_uptime_seconds() == 42

    def test_uptime_when_stopped_then_none(self) -> None:
        tracker = HealthTracker()
        tracker.record_started()
        tracker.record_stopped()

        assert tracker.get_uptime_seconds() is None

    def test_record_probe_when_mixed_results_then_counters_updated(self) -> None:
        tracker = HealthTracker()
        tracker.record_started()

        tracker.record_probe(True)
        tracker.record_probe(False)
        tracker.record_probe(True)
        snapshot = tracker.snapshot()

        assert snapshot.probe_count == 3
        assert snapshot.failed_probe_count == 1
        assert snapshot.last_probe_ok is True
        assert snapshot.last_probe_at is not None

    def test_record_started_when_restarted_then_probe_history_cleared(self) -> None:
        tracker = HealthTracker()
        tracker.record_started()
        tracker.record_probe(False)

        tracker.record_started()

        assert tracker.snapshot().probe_count == 0
        assert tracker.snapshot().last_probe_ok is None
