"""Monitor target repository for target lookup and registration."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from src.models.monitor_target import MonitorTarget

if TYPE_CHECKING:
    from src.services.database import Database

logger = structlog.get_logger(__name__)


class TargetRepository:
    """Repository for monitor target data access."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_target(self, target_id: int) -> MonitorTarget | None:
        """Get a target by ID."""
        row = self.db.fetchone("SELECT * FROM monitor_targets WHERE id = ?", (target_id,))
        return self._to_model(row) if row else None

    def get_all_targets(self) -> list[MonitorTarget]:
        """Get all targets ordered by ID."""
        rows = self.db.fetchall("SELECT * FROM monitor_targets ORDER BY id")
        return [self._to_model(row) for row in rows]

    def upsert_target(
        self,
        url: str,
        name: str | None = None,
        confirmation_threshold: int = 2,
        monitoring_enabled: bool = True,
        target_id: int | None = None,
    ) -> int:
        """Insert a target, or update it when ``target_id`` already exists. Returns target ID."""
        if confirmation_threshold < 1:
            msg = "confirmation_threshold must be at least 1"
            raise ValueError(msg)

        now = datetime.now(UTC).isoformat()
        with self.db.transaction() as cursor:
            existing = None
            if target_id is not None:
                existing = cursor.execute(
                    "SELECT id FROM monitor_targets WHERE id = ?", (target_id,)
                ).fetchone()

            if existing:
                cursor.execute(
                    """UPDATE monitor_targets SET
                       url = ?, name = ?, confirmation_threshold = ?,
                       monitoring_enabled = ?, updated_at = ?
                       WHERE id = ?""",
                    (
                        url,
                        name,
                        confirmation_threshold,
                        1 if monitoring_enabled else 0,
                        now,
                        target_id,
                    ),
                )
                logger.info("target_updated", target_id=target_id)
                return existing["id"]

            cursor.execute(
                """INSERT INTO monitor_targets
                   (id, url, name, confirmation_threshold, monitoring_enabled,
                    created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    target_id,
                    url,
                    name,
                    confirmation_threshold,
                    1 if monitoring_enabled else 0,
                    now,
                    now,
                ),
            )
            new_id = cursor.lastrowid or 0

        logger.info("target_registered", target_id=new_id, url=url)
        return new_id

    def _to_model(self, row: Any) -> MonitorTarget:
        data = dict(row)
        return MonitorTarget(
            id=data["id"],
            url=data["url"],
            name=data.get("name"),
            confirmation_threshold=data["confirmation_threshold"],
            monitoring_enabled=bool(data["monitoring_enabled"]),
        )
