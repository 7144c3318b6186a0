"""Evaluation outcome models returned to the job runner."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

from src.models.availability_state import AvailabilityState
from src.models.content_snapshot import ChangeLevel, DiffSummary
from src.models.transition_event import TransitionEvent

SkipReason = Literal["target_not_found", "monitoring_disabled"]


class SnapshotResult(BaseModel):
    """Result of the best-effort fingerprint and diff step.

    ``change_level`` is None when the step failed; ``error`` then carries the reason.
    """

    model_config = ConfigDict(frozen=True)

    attempted: bool = True
    snapshot_id: int | None = None
    sequence_number: int | None = None
    previous_snapshot_id: int | None = None
    change_level: ChangeLevel | None = None
    diff_summary: DiffSummary | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Whether a snapshot was persisted."""
        return self.error is None and self.snapshot_id is not None


class EvaluationOutcome(BaseModel):
    """Everything one probe evaluation produced."""

    model_config = ConfigDict(frozen=True)

    target_id: int
    skipped: bool = False
    skip_reason: SkipReason | None = None
    state: AvailabilityState | None = None
    transition: TransitionEvent | None = None
    snapshot: SnapshotResult | None = None

    @model_validator(mode="after")
    def validate_skip_consistency(self) -> EvaluationOutcome:
        """Skipped outcomes carry a reason and no results; evaluated ones carry a state."""
        if self.skipped:
            if self.skip_reason is None:
                msg = "skipped outcomes require a skip_reason"
                raise ValueError(msg)
            if self.state is not None or self.transition is not None or self.snapshot is not None:
                msg = "skipped outcomes cannot carry evaluation results"
                raise ValueError(msg)
        elif self.state is None:
            msg = "evaluated outcomes require a state"
            raise ValueError(msg)
        return self

    @classmethod
    def skipped_outcome(cls, target_id: int, reason: SkipReason) -> EvaluationOutcome:
        """Build a no-op outcome for a target that was not evaluated."""
        return cls(target_id=target_id, skipped=True, skip_reason=reason)
