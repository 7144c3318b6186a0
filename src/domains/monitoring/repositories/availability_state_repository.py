"""Availability state repository: one row per target, upserted on every probe."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from src.core.data_access import format_datetime, require_datetime
from src.models.availability_state import AvailabilityState

if TYPE_CHECKING:
    from src.services.database import Database

logger = structlog.get_logger(__name__)


class AvailabilityStateRepository:
    """Repository for availability state data access.

    Writes do not commit; callers wrap them in ``Database.transaction()``.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_state(self, target_id: int) -> AvailabilityState | None:
        """Get the current availability state for a target."""
        row = self.db.fetchone(
            "SELECT * FROM availability_states WHERE target_id = ?",
            (target_id,),
        )
        return self._to_model(row) if row else None

    def upsert_state(self, state: AvailabilityState) -> None:
        """Insert or replace the state row for ``state.target_id``."""
        self.db.execute(
            """INSERT INTO availability_states
               (target_id, state, consecutive_failures, consecutive_successes,
                last_outcome, last_http_status, last_latency_ms, last_final_url,
                last_observed_at, changed_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(target_id) DO UPDATE SET
                   state = excluded.state,
                   consecutive_failures = excluded.consecutive_failures,
                   consecutive_successes = excluded.consecutive_successes,
                   last_outcome = excluded.last_outcome,
                   last_http_status = excluded.last_http_status,
                   last_latency_ms = excluded.last_latency_ms,
                   last_final_url = excluded.last_final_url,
                   last_observed_at = excluded.last_observed_at,
                   changed_at = excluded.changed_at,
                   updated_at = excluded.updated_at""",
            (
                state.target_id,
                state.state.value,
                state.consecutive_failures,
                state.consecutive_successes,
                state.last_outcome.value,
                state.last_http_status,
                state.last_latency_ms,
                state.last_final_url,
                format_datetime(state.last_observed_at),
                format_datetime(state.changed_at),
                datetime.now(UTC).isoformat(),
            ),
        )

    def get_states_by_status(self, status: str) -> list[AvailabilityState]:
        """Get all states currently UP or DOWN."""
        rows = self.db.fetchall(
            "SELECT * FROM availability_states WHERE state = ? ORDER BY target_id",
            (status.upper(),),
        )
        return [self._to_model(row) for row in rows]

    def _to_model(self, row: Any) -> AvailabilityState:
        data = dict(row)
        return AvailabilityState(
            target_id=data["target_id"],
            state=data["state"],
            consecutive_failures=data["consecutive_failures"],
            consecutive_successes=data["consecutive_successes"],
            last_outcome=data["last_outcome"],
            last_http_status=data.get("last_http_status"),
            last_latency_ms=data.get("last_latency_ms"),
            last_final_url=data.get("last_final_url"),
            last_observed_at=require_datetime(data["last_observed_at"], "last_observed_at"),
            changed_at=require_datetime(data["changed_at"], "changed_at"),
        )
