"""Unit tests for pydantic models and configuration."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest
from pydantic import ValidationError

from src.models.availability_state import AvailabilityState, AvailabilityStatus
from src.models.config import Config
from src.models.content_snapshot import ChangeLevel, ContentSnapshot, DiffSummary
from src.models.evaluation_outcome import EvaluationOutcome, SnapshotResult
from src.models.monitor_target import MonitorTarget
from src.models.probe_result import ProbeOutcome, ProbeResult
from src.models.processing_error import ProcessingError
from src.models.transition_event import TransitionEvent

if TYPE_CHECKING:
    import pathlib

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _state(**overrides: Any) -> AvailabilityState:
    data: dict[str, Any] = {
        "target_id": 1,
        "state": "UP",
        "last_outcome": "SUCCESS",
        "last_observed_at": NOW,
        "changed_at": NOW,
    }
    data.update(overrides)
    return AvailabilityState(**data)


class TestProbeResult:
    """Tests for ProbeResult validation."""

    def test_success_requires_body_and_headers(self) -> None:
        with pytest.raises(ValidationError, match="body and headers"):
            ProbeResult(outcome="SUCCESS", http_status=200)

    def test_success_with_body(self, success_probe_data: dict[str, Any]) -> None:
        probe = ProbeResult(**success_probe_data)
        assert probe.is_success is True
        assert probe.outcome == ProbeOutcome.SUCCESS

    def test_failure_rejects_body(self) -> None:
        with pytest.raises(ValidationError, match="must not include body"):
            ProbeResult(outcome="ERROR", body="<html></html>", headers={})

    def test_failure_without_body(self) -> None:
        probe = ProbeResult(outcome="TIMEOUT", latency_ms=30000)
        assert probe.is_success is False
        assert probe.body is None

    def test_outcome_is_case_insensitive(self) -> None:
        assert ProbeResult(outcome="blocked").outcome == ProbeOutcome.BLOCKED

    def test_unknown_outcome_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ProbeResult(outcome="MAYBE")

    def test_http_status_range(self) -> None:
        with pytest.raises(ValidationError, match="http_status"):
            ProbeResult(outcome="ERROR", http_status=99)
        with pytest.raises(ValidationError, match="http_status"):
            ProbeResult(outcome="ERROR", http_status=600)

    def test_negative_latency_rejected(self) -> None:
        with pytest.raises(ValidationError, match="latency_ms"):
            ProbeResult(outcome="ERROR", latency_ms=-1)

    def test_naive_observed_at_becomes_utc(self) -> None:
        probe = ProbeResult(outcome="ERROR", observed_at=datetime(2026, 1, 1, 8, 30))
        assert probe.observed_at.tzinfo == UTC

    def test_multi_valued_headers_accepted(self) -> None:
        probe = ProbeResult(
            outcome="SUCCESS", body="", headers={"Set-Cookie": ["a=1", "b=2"]}
        )
        assert probe.headers == {"Set-Cookie": ["a=1", "b=2"]}


class TestAvailabilityState:
    """Tests for AvailabilityState invariants."""

    def test_valid_state(self) -> None:
        state = _state(consecutive_failures=1)
        assert state.state == AvailabilityStatus.UP

    def test_both_counters_nonzero_rejected(self) -> None:
        with pytest.raises(ValidationError, match="both be non-zero"):
            _state(consecutive_failures=1, consecutive_successes=1)

    def test_negative_counter_rejected(self) -> None:
        with pytest.raises(ValidationError, match="negative"):
            _state(consecutive_failures=-1)

    def test_unknown_state_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _state(state="DEGRADED")


class TestTransitionEvent:
    """Tests for TransitionEvent validation."""

    def test_valid_transition(self) -> None:
        event = TransitionEvent(
            target_id=1,
            from_state="UP",
            to_state="DOWN",
            reason_outcome="ERROR",
            reason_http_status=500,
            observed_at=NOW,
        )
        assert event.id is None
        assert event.to_state == AvailabilityStatus.DOWN
        assert event.created_at.tzinfo is not None

    def test_same_states_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must differ"):
            TransitionEvent(
                target_id=1,
                from_state="UP",
                to_state="UP",
                reason_outcome="SUCCESS",
                observed_at=NOW,
            )


class TestContentSnapshot:
    """Tests for ContentSnapshot chain position rules."""

    def test_first_snapshot_without_predecessor(self) -> None:
        snapshot = ContentSnapshot(target_id=1, sequence_number=1, body="", body_size=0)
        assert snapshot.change_level == ChangeLevel.NONE
        assert snapshot.diff_summary == DiffSummary()

    def test_first_snapshot_with_predecessor_rejected(self) -> None:
        with pytest.raises(ValidationError, match="first snapshot"):
            ContentSnapshot(
                target_id=1, sequence_number=1, body="", body_size=0, previous_snapshot_id=3
            )

    def test_later_snapshot_requires_predecessor(self) -> None:
        with pytest.raises(ValidationError, match="reference their predecessor"):
            ContentSnapshot(target_id=1, sequence_number=2, body="", body_size=0)

    def test_sequence_number_starts_at_one(self) -> None:
        with pytest.raises(ValidationError, match="sequence_number"):
            ContentSnapshot(target_id=1, sequence_number=0, body="", body_size=0)


class TestDiffSummary:
    """Tests for DiffSummary helpers."""

    def test_empty_summary_has_no_structural_change(self) -> None:
        assert DiffSummary(size_diff=500).has_structural_change is False

    def test_any_list_is_structural(self) -> None:
        assert DiffSummary(styles_removed=["/a.css"]).has_structural_change is True


class TestEvaluationOutcome:
    """Tests for EvaluationOutcome consistency rules."""

    def test_skipped_outcome_factory(self) -> None:
        outcome = EvaluationOutcome.skipped_outcome(5, "monitoring_disabled")
        assert outcome.skipped is True
        assert outcome.skip_reason == "monitoring_disabled"
        assert outcome.state is None

    def test_skipped_requires_reason(self) -> None:
        with pytest.raises(ValidationError, match="skip_reason"):
            EvaluationOutcome(target_id=1, skipped=True)

    def test_skipped_cannot_carry_results(self) -> None:
        with pytest.raises(ValidationError, match="cannot carry"):
            EvaluationOutcome(
                target_id=1, skipped=True, skip_reason="target_not_found", state=_state()
            )

    def test_evaluated_requires_state(self) -> None:
        with pytest.raises(ValidationError, match="require a state"):
            EvaluationOutcome(target_id=1)

    def test_snapshot_result_succeeded(self) -> None:
        assert SnapshotResult(snapshot_id=4, change_level="NONE").succeeded is True
        assert SnapshotResult(error="OperationalError: locked").succeeded is False


class TestMonitorTarget:
    """Tests for MonitorTarget validation."""

    def test_defaults(self) -> None:
        target = MonitorTarget(id=1, url="https://example.com")
        assert target.confirmation_threshold == 2
        assert target.monitoring_enabled is True

    def test_threshold_below_one_rejected(self) -> None:
        with pytest.raises(ValidationError, match="confirmation_threshold"):
            MonitorTarget(id=1, url="https://example.com", confirmation_threshold=0)

    def test_invalid_url_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MonitorTarget(id=1, url="not a url")

    def test_non_positive_id_rejected(self) -> None:
        with pytest.raises(ValidationError, match="greater than 0"):
            MonitorTarget(id=0, url="https://example.com")


class TestProcessingError:
    """Tests for ProcessingError validation."""

    def test_valid_error(self) -> None:
        error = ProcessingError(
            entity_type="target",
            entity_id=3,
            error_type="OperationalError",
            error_message="database is locked",
        )
        assert error.occurred_at.tzinfo is not None

    def test_error_type_must_be_pascal_case(self) -> None:
        with pytest.raises(ValidationError, match="PascalCase"):
            ProcessingError(entity_type="target", error_type="bad_type", error_message="x")

    def test_long_message_truncated(self) -> None:
        error = ProcessingError(
            entity_type="snapshot", error_type="ValueError", error_message="x" * 6000
        )
        assert len(error.error_message) == 5000

    def test_empty_message_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not be empty"):
            ProcessingError(entity_type="target", error_type="ValueError", error_message="")


class TestConfig:
    """Tests for Config loading and validation."""

    @pytest.fixture(autouse=True)
    def _isolate_env(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        for name in (
            "DATABASE_PATH",
            "LOG_LEVEL",
            "LOG_FORMAT",
            "DEFAULT_CONFIRMATION_THRESHOLD",
            "BATCH_MAX_WORKERS",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self) -> None:
        config = Config()
        assert config.database_path == "data/uptime.db"
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert config.default_confirmation_threshold == 2
        assert config.batch_max_workers == 4

    def test_reads_environment(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        db_path = str(tmp_path / "nested" / "uptime.db")
        monkeypatch.setenv("DATABASE_PATH", db_path)
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        config = Config()
        assert config.database_path == db_path
        assert (tmp_path / "nested").is_dir()
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError, match="log_level"):
            Config()

    def test_invalid_threshold(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_CONFIRMATION_THRESHOLD", "0")
        with pytest.raises(ValidationError, match="default_confirmation_threshold"):
            Config()

    def test_invalid_worker_count(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BATCH_MAX_WORKERS", "64")
        with pytest.raises(ValidationError, match="batch_max_workers"):
            Config()
