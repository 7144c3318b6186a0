"""Unit tests for utility modules: progress tracking, target locks, logging setup."""

from __future__ import annotations

import threading
import time

import pytest

from src.core.data_access import (
    deserialize_json_object,
    format_datetime,
    parse_datetime,
    require_datetime,
    serialize_json_field,
)
from src.domains.monitoring.services.target_locks import TargetLockRegistry
from src.utils.logger import configure_logging
from src.utils.progress import ProgressTracker


class TestProgressTracker:
    """Tests for ProgressTracker."""

    def test_initial_state(self) -> None:
        tracker = ProgressTracker(total=10)
        assert tracker.processed == 0
        assert tracker.successful == 0
        assert tracker.failed == 0
        assert tracker.skipped == 0
        assert tracker.errors == []
        assert tracker.label == "batch"

    def test_record_outcomes(self) -> None:
        tracker = ProgressTracker(total=3)
        tracker.record_success()
        tracker.record_failure("Target 4: database is locked")
        tracker.record_skip()
        assert tracker.processed == 3
        assert tracker.successful == 1
        assert tracker.failed == 1
        assert tracker.skipped == 1
        assert tracker.errors == ["Target 4: database is locked"]

    def test_progress_percentage(self) -> None:
        tracker = ProgressTracker(total=4)
        tracker.record_success()
        assert tracker.progress_percentage == 25.0

    def test_progress_percentage_empty_batch(self) -> None:
        assert ProgressTracker(total=0).progress_percentage == 100.0

    def test_summary(self) -> None:
        tracker = ProgressTracker(total=2, label="probe_evaluation")
        tracker.record_success()
        tracker.record_failure("boom")
        summary = tracker.summary()
        assert summary["processed"] == 2
        assert summary["successful"] == 1
        assert summary["failed"] == 1
        assert summary["skipped"] == 0
        assert summary["errors"] == ["boom"]
        assert isinstance(summary["duration_seconds"], float)

    def test_log_progress_does_not_raise(self) -> None:
        tracker = ProgressTracker(total=1)
        tracker.record_success()
        tracker.log_progress(every_n=10)

    def test_summary_errors_are_a_copy(self) -> None:
        tracker = ProgressTracker(total=2)
        tracker.record_failure("Target 1: locked")
        summary = tracker.summary()
        tracker.record_failure("Target 2: locked")
        assert summary["errors"] == ["Target 1: locked"]
        assert summary["failed"] == 1
        assert tracker.failed == 2

    def test_processed_counts_every_kind(self) -> None:
        tracker = ProgressTracker(total=5)
        for _ in range(2):
            tracker.record_success()
            tracker.record_skip()
        tracker.record_failure("x")
        assert tracker.processed == 5
        assert tracker.progress_percentage == 100.0


class TestTargetLockRegistry:
    """Tests for per-target locking."""

    def test_same_target_same_lock(self) -> None:
        registry = TargetLockRegistry()
        assert registry.lock_for(1) is registry.lock_for(1)
        assert len(registry) == 1

    def test_different_targets_different_locks(self) -> None:
        registry = TargetLockRegistry()
        assert registry.lock_for(1) is not registry.lock_for(2)
        assert len(registry) == 2

    def test_locks_are_retained_per_seen_target(self) -> None:
        registry = TargetLockRegistry()
        for target_id in range(5):
            with registry.hold(target_id):
                pass
        assert len(registry) == 5
        first = registry.lock_for(0)
        with registry.hold(0):
            assert first.locked()
        assert len(registry) == 5

    def test_hold_excludes_same_target(self) -> None:
        registry = TargetLockRegistry()
        entered = threading.Event()

        def contend() -> None:
            with registry.hold(1):
                entered.set()

        with registry.hold(1):
            thread = threading.Thread(target=contend)
            thread.start()
            time.sleep(0.05)
            assert not entered.is_set()
        thread.join(timeout=2)
        assert entered.is_set()

    def test_hold_allows_other_targets(self) -> None:
        registry = TargetLockRegistry()
        acquired: list[bool] = []
        with registry.hold(1):
            thread = threading.Thread(
                target=lambda: acquired.append(registry.lock_for(2).acquire(timeout=1))
            )
            thread.start()
            thread.join(timeout=2)
        assert acquired == [True]

    def test_hold_releases_on_error(self) -> None:
        registry = TargetLockRegistry()
        with pytest.raises(RuntimeError), registry.hold(3):
            raise RuntimeError("boom")
        assert registry.lock_for(3).acquire(blocking=False) is True


class TestDataAccess:
    """Tests for column serialization helpers."""

    def test_json_round_trip_is_sorted(self) -> None:
        assert serialize_json_field({"b": 1, "a": 2}) == '{"a": 2, "b": 1}'
        assert serialize_json_field(None) is None

    def test_deserialize_json_object_tolerates_bad_input(self) -> None:
        assert deserialize_json_object(None) == {}
        assert deserialize_json_object("not json") == {}
        assert deserialize_json_object("[1, 2]") == {}
        assert deserialize_json_object('{"a": 1}') == {"a": 1}

    def test_naive_datetimes_are_utc(self) -> None:
        from datetime import datetime

        formatted = format_datetime(datetime(2026, 1, 1, 0, 0))
        assert formatted == "2026-01-01T00:00:00+00:00"
        parsed = parse_datetime("2026-01-01T00:00:00")
        assert parsed is not None
        assert parsed.utcoffset() is not None

    def test_require_datetime_rejects_garbage(self) -> None:
        with pytest.raises(ValueError, match="observed_at"):
            require_datetime("yesterday", "observed_at")


class TestConfigureLogging:
    """Tests for structlog configuration."""

    def test_accepts_known_formats(self) -> None:
        configure_logging("DEBUG", "json")
        configure_logging("INFO", "console")

    def test_rejects_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="log_format"):
            configure_logging("INFO", "xml")
