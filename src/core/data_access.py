"""Data access pure functions for row mapping and column serialization."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any


def serialize_json_field(
    value: list[Any] | dict[str, Any] | None,
) -> str | None:
    """Serialize a list or dict to JSON string for SQLite storage."""
    if value is None:
        return None
    return json.dumps(value, sort_keys=True)


def deserialize_json_object(value: str | None) -> dict[str, Any]:
    """Deserialize a JSON object column. Missing or malformed values become {}."""
    if value is None:
        return {}
    try:
        result = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return {}
    if isinstance(result, dict):
        return result
    return {}


def format_datetime(dt: datetime | None) -> str | None:
    """Format datetime to ISO 8601 string for SQLite storage."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat()


def parse_datetime(value: str | None) -> datetime | None:
    """Parse ISO 8601 string from SQLite to datetime."""
    if value is None:
        return None
    try:
        dt = datetime.fromisoformat(value)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt
    except (ValueError, TypeError):
        return None


def require_datetime(value: str | None, column: str) -> datetime:
    """Parse a NOT NULL timestamp column, failing loudly on corrupt data."""
    parsed = parse_datetime(value)
    if parsed is None:
        msg = f"column {column} holds an invalid timestamp: {value!r}"
        raise ValueError(msg)
    return parsed
