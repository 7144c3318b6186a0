"""Fingerprint and diff engine: captures content snapshots and classifies change."""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING

import structlog

from src.domains.monitoring.core.content_diff import body_size, compute_diff
from src.domains.monitoring.core.fingerprint import extract_fingerprint
from src.domains.monitoring.core.http_headers import extract_content_type, normalize_headers
from src.models.content_snapshot import ContentSnapshot
from src.models.evaluation_outcome import SnapshotResult
from src.models.processing_error import ProcessingError

if TYPE_CHECKING:
    from src.domains.monitoring.repositories.processing_error_repository import (
        ProcessingErrorRepository,
    )
    from src.models.probe_result import ProbeResult
    from src.services.database import Database
    from src.services.protocols import SnapshotStoreProtocol

logger = structlog.get_logger(__name__)


class FingerprintDiffEngine:
    """Captures a snapshot per successful probe and diffs it against the chain head.

    Failures are recovered here: they are logged, recorded as processing
    errors and reported in the returned SnapshotResult, never raised.
    """

    def __init__(
        self,
        db: Database,
        snapshot_store: SnapshotStoreProtocol,
        error_repo: ProcessingErrorRepository | None = None,
    ) -> None:
        self.db = db
        self.snapshot_store = snapshot_store
        self.error_repo = error_repo

    def capture(self, target_id: int, probe: ProbeResult) -> SnapshotResult:
        """Fingerprint, diff and persist one successful probe's body."""
        try:
            snapshot = self._capture_snapshot(target_id, probe)
        except Exception as exc:
            logger.error(
                "snapshot_capture_failed",
                target_id=target_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            self._record_failure(target_id, exc)
            return SnapshotResult(attempted=True, error=f"{type(exc).__name__}: {exc}")

        logger.info(
            "snapshot_captured",
            target_id=target_id,
            snapshot_id=snapshot.id,
            sequence_number=snapshot.sequence_number,
            change_level=snapshot.change_level.value,
            body_size=snapshot.body_size,
            content_type=extract_content_type(snapshot.headers),
        )
        return SnapshotResult(
            attempted=True,
            snapshot_id=snapshot.id,
            sequence_number=snapshot.sequence_number,
            previous_snapshot_id=snapshot.previous_snapshot_id,
            change_level=snapshot.change_level,
            diff_summary=snapshot.diff_summary,
        )

    def _capture_snapshot(self, target_id: int, probe: ProbeResult) -> ContentSnapshot:
        if probe.body is None or probe.headers is None:
            msg = "snapshot capture requires a probe result with body and headers"
            raise ValueError(msg)

        body = probe.body
        current_fingerprint = extract_fingerprint(body)
        current_size = body_size(body)
        headers = normalize_headers(probe.headers)

        # The chain head is read and extended under one write lock so the chain stays linear
        with self.db.transaction():
            previous = self.snapshot_store.get_latest_snapshot(target_id)
            previous_input = None
            if previous is not None:
                previous_input = (extract_fingerprint(previous.body), previous.body_size)

            diff_summary, change_level = compute_diff(
                current_fingerprint, current_size, previous_input
            )
            snapshot = ContentSnapshot(
                target_id=target_id,
                sequence_number=previous.sequence_number + 1 if previous else 1,
                body=body,
                body_size=current_size,
                status_code=probe.http_status,
                headers=headers,
                previous_snapshot_id=previous.id if previous else None,
                diff_summary=diff_summary,
                change_level=change_level,
            )
            return self.snapshot_store.append_snapshot(snapshot)

    def _record_failure(self, target_id: int, exc: Exception) -> None:
        if self.error_repo is None:
            return
        try:
            self.error_repo.store_error(
                ProcessingError(
                    entity_type="target",
                    entity_id=target_id,
                    error_type=type(exc).__name__,
                    error_message=str(exc) or type(exc).__name__,
                )
            )
        except (sqlite3.Error, ValueError) as record_exc:
            logger.warning(
                "processing_error_not_recorded",
                target_id=target_id,
                error=str(record_exc),
            )
