"""Availability state model: the current UP/DOWN belief for a target."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from src.models.probe_result import ProbeOutcome


class AvailabilityStatus(StrEnum):
    """Debounced reachability of a target."""

    UP = "UP"
    DOWN = "DOWN"


class AvailabilityState(BaseModel):
    """Per-target run-length counters plus the last probe's observables."""

    model_config = ConfigDict(frozen=True)

    target_id: int
    state: AvailabilityStatus
    consecutive_failures: int = 0
    consecutive_successes: int = 0
    last_outcome: ProbeOutcome
    last_http_status: int | None = None
    last_latency_ms: int | None = None
    last_final_url: str | None = None
    last_observed_at: datetime
    changed_at: datetime

    @field_validator("consecutive_failures", "consecutive_successes")
    @classmethod
    def validate_counter(cls, value: int) -> int:
        """Counters cannot be negative."""
        if value < 0:
            msg = "consecutive counters must not be negative"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def validate_counter_exclusivity(self) -> AvailabilityState:
        """At most one run-length counter may be non-zero."""
        if self.consecutive_failures > 0 and self.consecutive_successes > 0:
            msg = "consecutive_failures and consecutive_successes cannot both be non-zero"
            raise ValueError(msg)
        return self
