"""Content snapshot model for captured response bodies and their diff against the predecessor."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class ChangeLevel(StrEnum):
    """Coarse classification of content change against the previous snapshot."""

    NONE = "NONE"
    MINOR = "MINOR"
    MODERATE = "MODERATE"
    MAJOR = "MAJOR"


class DiffSummary(BaseModel):
    """Additions and removals by category between two fingerprints."""

    model_config = ConfigDict(frozen=True)

    scripts_added: list[str] = []
    scripts_removed: list[str] = []
    styles_added: list[str] = []
    styles_removed: list[str] = []
    images_added: list[str] = []
    images_removed: list[str] = []
    meta_tags_changed: bool = False
    size_diff: int = 0
    size_change_percent: float | None = None

    @property
    def has_structural_change(self) -> bool:
        """Whether any URL set or the meta mapping differs."""
        return bool(
            self.scripts_added
            or self.scripts_removed
            or self.styles_added
            or self.styles_removed
            or self.images_added
            or self.images_removed
            or self.meta_tags_changed
        )


class ContentSnapshot(BaseModel):
    """One successful probe's captured content, linked to its predecessor."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    target_id: int
    sequence_number: int
    body: str
    body_size: int
    status_code: int | None = None
    headers: dict[str, str] = {}
    previous_snapshot_id: int | None = None
    diff_summary: DiffSummary = Field(default_factory=DiffSummary)
    change_level: ChangeLevel = ChangeLevel.NONE
    created_at: datetime = Field(default_factory=_utc_now)

    @field_validator("sequence_number")
    @classmethod
    def validate_sequence_number(cls, value: int) -> int:
        """Sequence numbers start at 1."""
        if value < 1:
            msg = "sequence_number must be at least 1"
            raise ValueError(msg)
        return value

    @field_validator("body_size")
    @classmethod
    def validate_body_size(cls, value: int) -> int:
        """Body size cannot be negative."""
        if value < 0:
            msg = "body_size must not be negative"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def validate_chain_position(self) -> ContentSnapshot:
        """Only the first snapshot of a chain has no predecessor."""
        if self.sequence_number == 1 and self.previous_snapshot_id is not None:
            msg = "the first snapshot of a target cannot have a predecessor"
            raise ValueError(msg)
        if self.sequence_number > 1 and self.previous_snapshot_id is None:
            msg = "snapshots after the first must reference their predecessor"
            raise ValueError(msg)
        return self
