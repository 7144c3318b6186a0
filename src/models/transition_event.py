"""Transition event model: immutable audit record of a confirmed state change."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.availability_state import AvailabilityStatus
from src.models.probe_result import ProbeOutcome


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class TransitionEvent(BaseModel):
    """A confirmed UP->DOWN or DOWN->UP flip for one target."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    target_id: int
    from_state: AvailabilityStatus
    to_state: AvailabilityStatus
    reason_outcome: ProbeOutcome
    reason_http_status: int | None = None
    observed_at: datetime
    created_at: datetime = Field(default_factory=_utc_now)

    @model_validator(mode="after")
    def validate_states_differ(self) -> TransitionEvent:
        """A transition must change the state."""
        if self.from_state == self.to_state:
            msg = "from_state and to_state must differ"
            raise ValueError(msg)
        return self
