"""Monitoring domain core -- pure functions for availability confirmation and content diffing."""

from __future__ import annotations

from src.domains.monitoring.core.confirmation import (
    ConfirmationStep,
    apply_probe,
    candidate_status,
    initialize_state,
)
from src.domains.monitoring.core.content_diff import (
    body_size,
    classify_change,
    compute_diff,
    size_change_percent,
)
from src.domains.monitoring.core.fingerprint import PageFingerprint, extract_fingerprint
from src.domains.monitoring.core.http_headers import extract_content_type, normalize_headers

__all__ = [
    # confirmation
    "ConfirmationStep",
    "apply_probe",
    "candidate_status",
    "initialize_state",
    # content_diff
    "body_size",
    "classify_change",
    "compute_diff",
    "size_change_percent",
    # fingerprint
    "PageFingerprint",
    "extract_fingerprint",
    # http_headers
    "extract_content_type",
    "normalize_headers",
]
