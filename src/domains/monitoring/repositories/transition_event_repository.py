"""Transition event repository: append-only audit log of confirmed state changes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from src.core.data_access import format_datetime, require_datetime
from src.models.transition_event import TransitionEvent

if TYPE_CHECKING:
    from src.services.database import Database

logger = structlog.get_logger(__name__)


class TransitionEventRepository:
    """Repository for transition event data access.

    Writes do not commit; callers wrap them in ``Database.transaction()``.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def append_transition(self, event: TransitionEvent) -> TransitionEvent:
        """Append a transition event. Returns the event with its assigned ID."""
        cursor = self.db.execute(
            """INSERT INTO transition_events
               (target_id, from_state, to_state, reason_outcome,
                reason_http_status, observed_at, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                event.target_id,
                event.from_state.value,
                event.to_state.value,
                event.reason_outcome.value,
                event.reason_http_status,
                format_datetime(event.observed_at),
                format_datetime(event.created_at),
            ),
        )
        return event.model_copy(update={"id": cursor.lastrowid})

    def list_transitions(self, target_id: int, limit: int = 50) -> list[TransitionEvent]:
        """Get the most recent transitions for a target, newest first."""
        rows = self.db.fetchall(
            """SELECT * FROM transition_events
               WHERE target_id = ?
               ORDER BY id DESC
               LIMIT ?""",
            (target_id, limit),
        )
        return [self._to_model(row) for row in rows]

    def count_transitions(self, target_id: int) -> int:
        """Count all transitions recorded for a target."""
        row = self.db.fetchone(
            "SELECT COUNT(*) as cnt FROM transition_events WHERE target_id = ?",
            (target_id,),
        )
        return row["cnt"] if row else 0

    def _to_model(self, row: Any) -> TransitionEvent:
        data = dict(row)
        return TransitionEvent(
            id=data["id"],
            target_id=data["target_id"],
            from_state=data["from_state"],
            to_state=data["to_state"],
            reason_outcome=data["reason_outcome"],
            reason_http_status=data.get("reason_http_status"),
            observed_at=require_datetime(data["observed_at"], "observed_at"),
            created_at=require_datetime(data["created_at"], "created_at"),
        )
