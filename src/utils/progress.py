"""Running tallies for batch evaluations."""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field

from src.utils.logger import get_logger

logger = get_logger(__name__)

_SUCCESS = "successful"
_FAILURE = "failed"
_SKIP = "skipped"


@dataclass
class ProgressTracker:
    """Tally of per-item results for one batch, labelled for the progress log.

    Not thread-safe: the batch evaluator records results from its own thread
    as worker futures complete.
    """

    total: int
    label: str = "batch"
    errors: list[str] = field(default_factory=list)
    _tally: Counter[str] = field(default_factory=Counter, repr=False)
    _started: float = field(default_factory=time.monotonic, repr=False)

    def record_success(self) -> None:
        self._tally[_SUCCESS] += 1

    def record_failure(self, error: str) -> None:
        """Count a failed item and keep its message for the summary."""
        self._tally[_FAILURE] += 1
        self.errors.append(error)

    def record_skip(self) -> None:
        self._tally[_SKIP] += 1

    @property
    def successful(self) -> int:
        return self._tally[_SUCCESS]

    @property
    def failed(self) -> int:
        return self._tally[_FAILURE]

    @property
    def skipped(self) -> int:
        return self._tally[_SKIP]

    @property
    def processed(self) -> int:
        return sum(self._tally.values())

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self._started

    @property
    def progress_percentage(self) -> float:
        """Share of ``total`` already recorded; an empty batch counts as complete."""
        if self.total == 0:
            return 100.0
        return self.processed * 100.0 / self.total

    def log_progress(self, every_n: int = 10) -> None:
        """Emit ``batch_progress`` on every Nth item and on the last one."""
        done = self.processed
        if done != self.total and done % every_n:
            return
        logger.info(
            "batch_progress",
            label=self.label,
            processed=done,
            total=self.total,
            percentage=f"{self.progress_percentage:.1f}%",
            elapsed=f"{self.elapsed_seconds:.1f}s",
            **{key: self._tally[key] for key in (_SUCCESS, _FAILURE, _SKIP)},
        )

    def summary(self) -> dict[str, int | float | list[str]]:
        """Counts, duration and collected error messages."""
        return {
            "processed": self.processed,
            _SUCCESS: self.successful,
            _FAILURE: self.failed,
            _SKIP: self.skipped,
            "duration_seconds": round(self.elapsed_seconds, 2),
            "errors": list(self.errors),
        }
