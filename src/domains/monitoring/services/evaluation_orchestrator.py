"""Evaluation orchestrator: sequences the confirmation and snapshot steps per probe."""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

import structlog

from src.domains.monitoring.repositories.availability_state_repository import (
    AvailabilityStateRepository,
)
from src.domains.monitoring.repositories.processing_error_repository import (
    ProcessingErrorRepository,
)
from src.domains.monitoring.repositories.snapshot_repository import SnapshotRepository
from src.domains.monitoring.repositories.target_repository import TargetRepository
from src.domains.monitoring.repositories.transition_event_repository import (
    TransitionEventRepository,
)
from src.domains.monitoring.services.confirmation_state_machine import (
    ConfirmationStateMachine,
)
from src.domains.monitoring.services.fingerprint_diff_engine import FingerprintDiffEngine
from src.domains.monitoring.services.target_locks import TargetLockRegistry
from src.models.evaluation_outcome import EvaluationOutcome, SkipReason
from src.models.probe_result import ProbeResult

if TYPE_CHECKING:
    from src.models.monitor_target import MonitorTarget
    from src.services.database import Database
    from src.services.protocols import TargetLookupProtocol

logger = structlog.get_logger(__name__)


class EvaluationError(Exception):
    """The availability step could not be read or persisted; the probe is not evaluated.

    The caller owns retry policy and may replay the whole probe.
    """

    def __init__(self, target_id: int, message: str) -> None:
        super().__init__(f"evaluation failed for target {target_id}: {message}")
        self.target_id = target_id


class EvaluationOrchestrator:
    """Runs the confirmation state machine, then the snapshot step on SUCCESS.

    The confirmation step is required and its persistence errors fail the
    evaluation. The snapshot step is best-effort and reports its failures in
    the outcome instead. Both run under the target's lock.
    """

    def __init__(
        self,
        state_machine: ConfirmationStateMachine,
        diff_engine: FingerprintDiffEngine,
        target_lookup: TargetLookupProtocol | None = None,
        locks: TargetLockRegistry | None = None,
    ) -> None:
        self.state_machine = state_machine
        self.diff_engine = diff_engine
        self.target_lookup = target_lookup
        self.locks = locks or TargetLockRegistry()

    def evaluate(
        self,
        target_id: int,
        confirmation_threshold: int,
        probe_result: ProbeResult | dict[str, Any],
    ) -> EvaluationOutcome:
        """Evaluate one probe for one target.

        When a target lookup is configured, missing targets and targets with
        monitoring disabled are skipped rather than evaluated.

        Raises pydantic ValidationError for malformed probe payloads,
        ValueError for a threshold below 1 and EvaluationError when the
        availability state cannot be read or persisted.
        """
        probe = self._validate_probe(probe_result)
        if confirmation_threshold < 1:
            msg = f"confirmation_threshold must be at least 1, got {confirmation_threshold}"
            raise ValueError(msg)

        if self.target_lookup is not None:
            target = self.target_lookup.get_target(target_id)
            if target is None or not target.monitoring_enabled:
                return self._skipped(target_id, target)

        return self._run(target_id, confirmation_threshold, probe)

    def evaluate_target(
        self,
        target_id: int,
        probe_result: ProbeResult | dict[str, Any],
    ) -> EvaluationOutcome:
        """Look up the target, then evaluate the probe with its confirmation threshold.

        Missing targets and targets with monitoring disabled are skipped, not raised.
        """
        if self.target_lookup is None:
            msg = "evaluate_target requires a target lookup"
            raise RuntimeError(msg)

        target = self.target_lookup.get_target(target_id)
        if target is None or not target.monitoring_enabled:
            return self._skipped(target_id, target)

        probe = self._validate_probe(probe_result)
        return self._run(target.id, target.confirmation_threshold, probe)

    @staticmethod
    def _validate_probe(probe_result: ProbeResult | dict[str, Any]) -> ProbeResult:
        if isinstance(probe_result, ProbeResult):
            return probe_result
        return ProbeResult.model_validate(probe_result)

    @staticmethod
    def _skipped(target_id: int, target: MonitorTarget | None) -> EvaluationOutcome:
        reason: SkipReason = "target_not_found" if target is None else "monitoring_disabled"
        logger.warning("evaluation_skipped", target_id=target_id, reason=reason)
        return EvaluationOutcome.skipped_outcome(target_id, reason)

    def _run(
        self,
        target_id: int,
        confirmation_threshold: int,
        probe: ProbeResult,
    ) -> EvaluationOutcome:
        with self.locks.hold(target_id):
            try:
                step = self.state_machine.process_probe(target_id, confirmation_threshold, probe)
            except (sqlite3.Error, ValueError) as exc:
                # ValueError covers stored rows that no longer validate
                logger.error(
                    "evaluation_failed",
                    target_id=target_id,
                    outcome=probe.outcome.value,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise EvaluationError(target_id, str(exc)) from exc

            snapshot = None
            if probe.is_success:
                snapshot = self.diff_engine.capture(target_id, probe)

        return EvaluationOutcome(
            target_id=target_id,
            state=step.state,
            transition=step.transition,
            snapshot=snapshot,
        )


def build_orchestrator(db: Database) -> EvaluationOrchestrator:
    """Wire the orchestrator against the SQLite repositories."""
    state_machine = ConfirmationStateMachine(
        db,
        AvailabilityStateRepository(db),
        TransitionEventRepository(db),
    )
    diff_engine = FingerprintDiffEngine(
        db,
        SnapshotRepository(db),
        ProcessingErrorRepository(db),
    )
    return EvaluationOrchestrator(
        state_machine,
        diff_engine,
        target_lookup=TargetRepository(db),
    )
