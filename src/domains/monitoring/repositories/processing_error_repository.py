"""Processing error repository for recovered failures."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from src.core.data_access import format_datetime

if TYPE_CHECKING:
    from src.models.processing_error import ProcessingError
    from src.services.database import Database

logger = structlog.get_logger(__name__)


class ProcessingErrorRepository:
    """Repository for processing error records."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def store_error(self, error: ProcessingError) -> int:
        """Store a processing error in its own transaction. Returns record ID."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """INSERT INTO processing_errors
                   (entity_type, entity_id, error_type, error_message, occurred_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    error.entity_type,
                    error.entity_id,
                    error.error_type,
                    error.error_message,
                    format_datetime(error.occurred_at),
                ),
            )
            return cursor.lastrowid or 0

    def get_errors(
        self,
        entity_type: str | None = None,
        entity_id: int | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Get recent processing errors, optionally filtered, newest first."""
        sql = "SELECT * FROM processing_errors WHERE 1 = 1"
        params: list[Any] = []
        if entity_type is not None:
            sql += " AND entity_type = ?"
            params.append(entity_type)
        if entity_id is not None:
            sql += " AND entity_id = ?"
            params.append(entity_id)
        sql += " ORDER BY id DESC LIMIT ?"
        params.append(limit)
        rows = self.db.fetchall(sql, tuple(params))
        return [dict(row) for row in rows]
