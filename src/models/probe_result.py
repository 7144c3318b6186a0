"""Probe result model: the raw outcome of one network check against a target."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class ProbeOutcome(StrEnum):
    """Outcome category reported by the probe executor."""

    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    TIMEOUT = "TIMEOUT"
    BLOCKED = "BLOCKED"


class ProbeResult(BaseModel):
    """Result of a single probe.

    Body and headers are present if and only if the outcome is SUCCESS.
    Header values may be strings or lists of strings (multi-valued headers).
    """

    model_config = ConfigDict(frozen=True)

    outcome: ProbeOutcome
    http_status: int | None = None
    final_url: str | None = None
    latency_ms: int = 0
    observed_at: datetime = Field(default_factory=_utc_now)
    body: str | None = None
    headers: dict[str, str | list[str] | None] | None = None

    @field_validator("outcome", mode="before")
    @classmethod
    def normalize_outcome(cls, value: object) -> object:
        """Accept outcome names in any case."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("http_status")
    @classmethod
    def validate_http_status(cls, value: int | None) -> int | None:
        """HTTP status must be between 100 and 599."""
        if value is not None and (value < 100 or value > 599):
            msg = "http_status must be between 100 and 599"
            raise ValueError(msg)
        return value

    @field_validator("latency_ms")
    @classmethod
    def validate_latency_ms(cls, value: int) -> int:
        """Latency cannot be negative."""
        if value < 0:
            msg = "latency_ms must not be negative"
            raise ValueError(msg)
        return value

    @field_validator("observed_at")
    @classmethod
    def validate_observed_at(cls, value: datetime) -> datetime:
        """Naive timestamps are interpreted as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def validate_body_matches_outcome(self) -> ProbeResult:
        """Body and headers must accompany SUCCESS and only SUCCESS."""
        if self.outcome == ProbeOutcome.SUCCESS:
            if self.body is None or self.headers is None:
                msg = "SUCCESS probe results must include body and headers"
                raise ValueError(msg)
        elif self.body is not None or self.headers is not None:
            msg = f"{self.outcome.value} probe results must not include body or headers"
            raise ValueError(msg)
        return self

    @property
    def is_success(self) -> bool:
        """Whether the probe retrieved content."""
        return self.outcome == ProbeOutcome.SUCCESS
