"""Confirmation state machine service: persists debounced availability state."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

import structlog

from src.domains.monitoring.core.confirmation import ConfirmationStep, apply_probe

if TYPE_CHECKING:
    from src.models.probe_result import ProbeResult
    from src.services.database import Database
    from src.services.protocols import (
        AvailabilityStateStoreProtocol,
        TransitionEventStoreProtocol,
    )

logger = structlog.get_logger(__name__)


class ConfirmationStateMachine:
    """Applies probes to per-target availability state.

    The state read, the state upsert and the optional transition append run in
    one write transaction. Persistence errors roll back and propagate; nothing
    is retried here.
    """

    def __init__(
        self,
        db: Database,
        state_store: AvailabilityStateStoreProtocol,
        transition_store: TransitionEventStoreProtocol,
    ) -> None:
        self.db = db
        self.state_store = state_store
        self.transition_store = transition_store

    def process_probe(
        self,
        target_id: int,
        confirmation_threshold: int,
        probe: ProbeResult,
    ) -> ConfirmationStep:
        """Apply one probe and persist the resulting state (and transition, if confirmed)."""
        with self.db.transaction():
            current = self.state_store.get_state(target_id)
            step = apply_probe(current, probe, confirmation_threshold, target_id=target_id)
            self.state_store.upsert_state(step.state)
            if step.transition is not None:
                stored = self.transition_store.append_transition(step.transition)
                step = dataclasses.replace(step, transition=stored)

        if step.initialized:
            logger.info(
                "availability_state_initialized",
                target_id=target_id,
                state=step.state.state.value,
                outcome=probe.outcome.value,
            )
        elif step.transition is not None:
            logger.info(
                "availability_transition_confirmed",
                target_id=target_id,
                from_state=step.transition.from_state.value,
                to_state=step.transition.to_state.value,
                outcome=probe.outcome.value,
                http_status=probe.http_status,
                confirmation_threshold=confirmation_threshold,
            )
        else:
            logger.debug(
                "availability_state_unchanged",
                target_id=target_id,
                state=step.state.state.value,
                consecutive_failures=step.state.consecutive_failures,
                consecutive_successes=step.state.consecutive_successes,
            )
        return step
