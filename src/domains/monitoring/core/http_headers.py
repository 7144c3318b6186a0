"""HTTP header normalization utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


def normalize_headers(headers: Mapping[str, str | list[str] | None]) -> dict[str, str]:
    """Flatten response headers to a plain string mapping.

    Multi-valued headers are joined with ", "; missing or empty values are dropped.
    """
    normalized: dict[str, str] = {}
    for key, value in headers.items():
        if isinstance(value, list):
            joined = ", ".join(str(item) for item in value)
            if joined:
                normalized[key] = joined
        elif value:
            normalized[key] = str(value)
    return normalized


def extract_content_type(headers: Mapping[str, str]) -> str | None:
    """Extract Content-Type from headers dict (case-insensitive)."""
    for key, value in headers.items():
        if key.lower() == "content-type":
            return value.split(";")[0].strip()
    return None
