"""Monitor target model for endpoints under observation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, HttpUrl, field_validator


class MonitorTarget(BaseModel):
    """An endpoint under observation, as supplied by the target lookup."""

    model_config = ConfigDict(frozen=True)

    id: int
    url: HttpUrl
    name: str | None = None
    confirmation_threshold: int = 2
    monitoring_enabled: bool = True

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: int) -> int:
        """Target ID must be positive."""
        if value <= 0:
            msg = "id must be greater than 0"
            raise ValueError(msg)
        return value

    @field_validator("confirmation_threshold")
    @classmethod
    def validate_confirmation_threshold(cls, value: int) -> int:
        """At least one corroborating probe is required to confirm a transition."""
        if value < 1:
            msg = "confirmation_threshold must be at least 1"
            raise ValueError(msg)
        return value

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        """Name must not exceed 500 characters."""
        if value is not None and len(value) > 500:
            msg = "name must not exceed 500 characters"
            raise ValueError(msg)
        return value
