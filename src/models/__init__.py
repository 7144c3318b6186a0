"""Pydantic data models for the uptime and content change evaluation core."""

from src.models.availability_state import AvailabilityState, AvailabilityStatus
from src.models.config import Config
from src.models.content_snapshot import ChangeLevel, ContentSnapshot, DiffSummary
from src.models.evaluation_outcome import EvaluationOutcome, SnapshotResult
from src.models.monitor_target import MonitorTarget
from src.models.probe_result import ProbeOutcome, ProbeResult
from src.models.processing_error import ProcessingError
from src.models.transition_event import TransitionEvent

__all__ = [
    "AvailabilityState",
    "AvailabilityStatus",
    "ChangeLevel",
    "Config",
    "ContentSnapshot",
    "DiffSummary",
    "EvaluationOutcome",
    "MonitorTarget",
    "ProbeOutcome",
    "ProbeResult",
    "ProcessingError",
    "SnapshotResult",
    "TransitionEvent",
]
