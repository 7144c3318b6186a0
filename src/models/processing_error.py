"""Processing error model for recording best-effort step failures."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class ProcessingError(BaseModel):
    """A failure that was recovered locally rather than failing the evaluation."""

    entity_type: Literal["target", "snapshot"]
    entity_id: int | None = None
    error_type: str
    error_message: str
    occurred_at: datetime = Field(default_factory=_utc_now)

    @field_validator("error_type")
    @classmethod
    def validate_error_type(cls, value: str) -> str:
        """Error type must be PascalCase and between 1-100 characters."""
        if not value or len(value) > 100:
            msg = "error_type must be between 1 and 100 characters"
            raise ValueError(msg)
        if not re.fullmatch(r"[A-Z][a-zA-Z0-9]*", value):
            msg = "error_type must be in PascalCase format"
            raise ValueError(msg)
        return value

    @field_validator("error_message")
    @classmethod
    def validate_error_message(cls, value: str) -> str:
        """Error message must be non-empty; long messages are truncated to 5000 characters."""
        if not value:
            msg = "error_message must not be empty"
            raise ValueError(msg)
        return value[:5000]
