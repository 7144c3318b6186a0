"""Fingerprint diffing and change level classification."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.models.content_snapshot import ChangeLevel, DiffSummary

if TYPE_CHECKING:
    from src.domains.monitoring.core.fingerprint import PageFingerprint

MAJOR_SIZE_CHANGE_PERCENT = 50.0
MODERATE_SIZE_CHANGE_PERCENT = 10.0
# More than this many added scripts is a MAJOR change on its own
MAJOR_SCRIPTS_ADDED = 3


def body_size(body: str) -> int:
    """Size of the body in bytes when encoded as UTF-8."""
    return len(body.encode("utf-8"))


def size_change_percent(current_size: int, previous_size: int) -> float | None:
    """Percentage size change relative to the previous size.

    Returns None when the previous size is 0 (the ratio is undefined).
    """
    if previous_size == 0:
        return None
    return (current_size - previous_size) / previous_size * 100


def classify_change(summary: DiffSummary) -> ChangeLevel:
    """Classify a diff summary. First matching rule wins.

    1. No structural difference -> NONE
    2. |size change| > 50% or more than 3 scripts added -> MAJOR
    3. |size change| > 10% or any script added -> MODERATE
    4. Otherwise -> MINOR

    Growth from an empty previous body counts as an unbounded size change.
    """
    if not summary.has_structural_change:
        return ChangeLevel.NONE

    percent = summary.size_change_percent
    if percent is None:
        magnitude = float("inf") if summary.size_diff != 0 else 0.0
    else:
        magnitude = abs(percent)

    scripts_added = len(summary.scripts_added)
    if magnitude > MAJOR_SIZE_CHANGE_PERCENT or scripts_added > MAJOR_SCRIPTS_ADDED:
        return ChangeLevel.MAJOR
    if magnitude > MODERATE_SIZE_CHANGE_PERCENT or scripts_added >= 1:
        return ChangeLevel.MODERATE
    return ChangeLevel.MINOR


def compute_diff(
    current: PageFingerprint,
    current_size: int,
    previous: tuple[PageFingerprint, int] | None,
) -> tuple[DiffSummary, ChangeLevel]:
    """Diff the current fingerprint against the previous one.

    ``previous`` is (fingerprint, byte size) of the predecessor snapshot, or
    None for the first snapshot of a target, which always yields an empty diff
    classified NONE.

    Returns (diff_summary, change_level).
    """
    if previous is None:
        return DiffSummary(), ChangeLevel.NONE

    prev_fingerprint, prev_size = previous
    summary = DiffSummary(
        scripts_added=sorted(current.scripts - prev_fingerprint.scripts),
        scripts_removed=sorted(prev_fingerprint.scripts - current.scripts),
        styles_added=sorted(current.styles - prev_fingerprint.styles),
        styles_removed=sorted(prev_fingerprint.styles - current.styles),
        images_added=sorted(current.images - prev_fingerprint.images),
        images_removed=sorted(prev_fingerprint.images - current.images),
        meta_tags_changed=current.meta_tags != prev_fingerprint.meta_tags,
        size_diff=current_size - prev_size,
        size_change_percent=size_change_percent(current_size, prev_size),
    )
    return summary, classify_change(summary)
