"""Content snapshot repository: append-only backward-linked chain per target."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from src.core.data_access import (
    deserialize_json_object,
    format_datetime,
    require_datetime,
    serialize_json_field,
)
from src.models.content_snapshot import ContentSnapshot, DiffSummary

if TYPE_CHECKING:
    from src.services.database import Database

logger = structlog.get_logger(__name__)


class SnapshotRepository:
    """Repository for content snapshot data access.

    Writes do not commit; callers wrap them in ``Database.transaction()``.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def append_snapshot(self, snapshot: ContentSnapshot) -> ContentSnapshot:
        """Append a snapshot to its target's chain. Returns it with its assigned ID.

        The unique (target_id, sequence_number) and previous_snapshot_id indexes
        reject a second writer building on the same predecessor.
        """
        cursor = self.db.execute(
            """INSERT INTO content_snapshots
               (target_id, sequence_number, body, body_size, status_code, headers,
                previous_snapshot_id, diff_summary, change_level, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                snapshot.target_id,
                snapshot.sequence_number,
                snapshot.body,
                snapshot.body_size,
                snapshot.status_code,
                serialize_json_field(snapshot.headers),
                snapshot.previous_snapshot_id,
                json.dumps(snapshot.diff_summary.model_dump()),
                snapshot.change_level.value,
                format_datetime(snapshot.created_at),
            ),
        )
        return snapshot.model_copy(update={"id": cursor.lastrowid})

    def get_latest_snapshot(self, target_id: int) -> ContentSnapshot | None:
        """Get the head of a target's chain, including its stored body."""
        row = self.db.fetchone(
            """SELECT * FROM content_snapshots
               WHERE target_id = ?
               ORDER BY sequence_number DESC
               LIMIT 1""",
            (target_id,),
        )
        return self._to_model(row) if row else None

    def get_snapshot_by_id(self, snapshot_id: int) -> ContentSnapshot | None:
        """Get a snapshot by ID."""
        row = self.db.fetchone("SELECT * FROM content_snapshots WHERE id = ?", (snapshot_id,))
        return self._to_model(row) if row else None

    def list_snapshots(self, target_id: int, limit: int = 20) -> list[ContentSnapshot]:
        """Get the most recent snapshots for a target, newest first."""
        rows = self.db.fetchall(
            """SELECT * FROM content_snapshots
               WHERE target_id = ?
               ORDER BY sequence_number DESC
               LIMIT ?""",
            (target_id, limit),
        )
        return [self._to_model(row) for row in rows]

    def count_snapshots(self, target_id: int) -> int:
        """Count total snapshots for a target."""
        row = self.db.fetchone(
            "SELECT COUNT(*) as cnt FROM content_snapshots WHERE target_id = ?",
            (target_id,),
        )
        return row["cnt"] if row else 0

    def walk_chain(self, snapshot_id: int) -> list[ContentSnapshot]:
        """Follow previous_snapshot_id links from a snapshot back to the start of its chain.

        Returns snapshots newest first. Raises ValueError if the links form a cycle.
        """
        chain: list[ContentSnapshot] = []
        seen: set[int] = set()
        current = self.get_snapshot_by_id(snapshot_id)
        while current is not None:
            if current.id in seen:
                msg = f"snapshot chain cycles back to snapshot {current.id}"
                raise ValueError(msg)
            seen.add(current.id or 0)
            chain.append(current)
            if current.previous_snapshot_id is None:
                break
            current = self.get_snapshot_by_id(current.previous_snapshot_id)
        return chain

    def _to_model(self, row: Any) -> ContentSnapshot:
        data = dict(row)
        return ContentSnapshot(
            id=data["id"],
            target_id=data["target_id"],
            sequence_number=data["sequence_number"],
            body=data["body"],
            body_size=data["body_size"],
            status_code=data.get("status_code"),
            headers=deserialize_json_object(data.get("headers")),
            previous_snapshot_id=data.get("previous_snapshot_id"),
            diff_summary=DiffSummary.model_validate(
                deserialize_json_object(data.get("diff_summary"))
            ),
            change_level=data["change_level"],
            created_at=require_datetime(data["created_at"], "created_at"),
        )
