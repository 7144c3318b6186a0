"""Batch probe evaluation with per-target ordering and cross-target parallelism."""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from src.models.content_snapshot import ChangeLevel
from src.models.evaluation_outcome import EvaluationOutcome
from src.models.probe_result import ProbeResult
from src.utils.progress import ProgressTracker

if TYPE_CHECKING:
    from pathlib import Path

    from src.domains.monitoring.services.evaluation_orchestrator import (
        EvaluationOrchestrator,
    )

logger = structlog.get_logger(__name__)

# (outcome, error) per probe, in the order the probes were submitted
_ProbeResults = list[tuple[EvaluationOutcome | None, str | None]]


def load_probe_file(path: Path) -> list[tuple[int, ProbeResult]]:
    """Parse a JSON-lines file of probes.

    Each non-blank line is an object with ``target_id`` plus ProbeResult fields.
    Raises ValueError naming the line number on the first malformed line.
    """
    probes: list[tuple[int, ProbeResult]] = []
    with path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                data = json.loads(line)
                if not isinstance(data, dict):
                    msg = "expected a JSON object"
                    raise ValueError(msg)
                target_id = int(data.pop("target_id"))
                probes.append((target_id, ProbeResult.model_validate(data)))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                # ValidationError is a ValueError subclass
                reason = exc.errors()[0]["msg"] if isinstance(exc, ValidationError) else str(exc)
                msg = f"line {line_number}: invalid probe record ({reason})"
                raise ValueError(msg) from exc
    return probes


class BatchEvaluator:
    """Evaluates many probes: targets in parallel, each target's probes in order."""

    def __init__(self, orchestrator: EvaluationOrchestrator) -> None:
        self.orchestrator = orchestrator

    def evaluate_batch(
        self,
        probes: list[tuple[int, ProbeResult]],
        max_workers: int = 4,
    ) -> dict[str, Any]:
        """Evaluate (target_id, probe) pairs.

        Returns summary stats plus transition and detected-change counts.
        """
        grouped: dict[int, list[ProbeResult]] = {}
        for target_id, probe in probes:
            grouped.setdefault(target_id, []).append(probe)

        tracker = ProgressTracker(total=len(probes), label="probe_evaluation")
        transitions = 0
        changes_detected = 0

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self._evaluate_target_probes, target_id, target_probes): target_id
                for target_id, target_probes in grouped.items()
            }

            for future in as_completed(futures):
                target_id = futures[future]
                for outcome, error in future.result():
                    if error is not None:
                        tracker.record_failure(f"Target {target_id}: {error}")
                    elif outcome is None or outcome.skipped:
                        tracker.record_skip()
                    else:
                        tracker.record_success()
                        if outcome.transition is not None:
                            transitions += 1
                        snapshot = outcome.snapshot
                        if (
                            snapshot is not None
                            and snapshot.change_level is not None
                            and snapshot.change_level != ChangeLevel.NONE
                        ):
                            changes_detected += 1
                    tracker.log_progress(every_n=50)

        summary: dict[str, Any] = dict(tracker.summary())
        summary["targets"] = len(grouped)
        summary["transitions"] = transitions
        summary["changes_detected"] = changes_detected
        return summary

    def _evaluate_target_probes(
        self, target_id: int, probes: list[ProbeResult]
    ) -> _ProbeResults:
        results: _ProbeResults = []
        for probe in probes:
            try:
                results.append((self.orchestrator.evaluate_target(target_id, probe), None))
            except Exception as exc:
                logger.error(
                    "batch_evaluation_failed",
                    target_id=target_id,
                    error=str(exc),
                )
                results.append((None, str(exc)))
        return results
