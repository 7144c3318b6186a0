"""Confirmation state machine rules for debounced UP/DOWN transitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.models.availability_state import AvailabilityState, AvailabilityStatus
from src.models.probe_result import ProbeOutcome, ProbeResult
from src.models.transition_event import TransitionEvent


@dataclass(frozen=True)
class ConfirmationStep:
    """Result of applying one probe to a target's availability state."""

    state: AvailabilityState
    transition: TransitionEvent | None = None
    initialized: bool = False


def candidate_status(outcome: ProbeOutcome) -> AvailabilityStatus:
    """Map a probe outcome to the state it argues for.

    SUCCESS -> UP; ERROR, TIMEOUT, BLOCKED -> DOWN.
    """
    if outcome == ProbeOutcome.SUCCESS:
        return AvailabilityStatus.UP
    return AvailabilityStatus.DOWN


def _observed_fields(probe: ProbeResult) -> dict[str, Any]:
    return {
        "last_outcome": probe.outcome,
        "last_http_status": probe.http_status,
        "last_latency_ms": probe.latency_ms,
        "last_final_url": probe.final_url,
        "last_observed_at": probe.observed_at,
    }


def initialize_state(target_id: int, probe: ProbeResult) -> AvailabilityState:
    """Create the first state for a target.

    The state starts UP whatever the first outcome is; a DOWN first probe only
    starts the failure run.
    """
    candidate = candidate_status(probe.outcome)
    return AvailabilityState(
        target_id=target_id,
        state=AvailabilityStatus.UP,
        consecutive_failures=1 if candidate == AvailabilityStatus.DOWN else 0,
        consecutive_successes=1 if candidate == AvailabilityStatus.UP else 0,
        changed_at=probe.observed_at,
        **_observed_fields(probe),
    )


def apply_probe(
    current: AvailabilityState | None,
    probe: ProbeResult,
    confirmation_threshold: int,
    target_id: int,
) -> ConfirmationStep:
    """Apply one probe to the current state and decide whether to transition.

    Returns the new state and, when the probe completes a run of
    ``confirmation_threshold`` candidates against the current state, the
    transition event. Counters reset to 0 on a confirmed transition.
    """
    if confirmation_threshold < 1:
        msg = f"confirmation_threshold must be at least 1, got {confirmation_threshold}"
        raise ValueError(msg)

    if current is None:
        return ConfirmationStep(state=initialize_state(target_id, probe), initialized=True)

    if current.target_id != target_id:
        msg = f"state belongs to target {current.target_id}, not {target_id}"
        raise ValueError(msg)

    candidate = candidate_status(probe.outcome)
    if candidate == AvailabilityStatus.DOWN:
        failures = current.consecutive_failures + 1
        successes = 0
        run_length = failures
    else:
        failures = 0
        successes = current.consecutive_successes + 1
        run_length = successes

    new_status = current.state
    changed_at = current.changed_at
    transition: TransitionEvent | None = None

    if candidate != current.state and run_length >= confirmation_threshold:
        transition = TransitionEvent(
            target_id=target_id,
            from_state=current.state,
            to_state=candidate,
            reason_outcome=probe.outcome,
            reason_http_status=probe.http_status,
            observed_at=probe.observed_at,
        )
        new_status = candidate
        changed_at = probe.observed_at
        failures = 0
        successes = 0

    state = AvailabilityState(
        target_id=target_id,
        state=new_status,
        consecutive_failures=failures,
        consecutive_successes=successes,
        changed_at=changed_at,
        **_observed_fields(probe),
    )
    return ConfirmationStep(state=state, transition=transition)
