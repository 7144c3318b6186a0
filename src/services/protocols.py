"""Service protocols defining the collaborators the evaluation core consumes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from src.models.availability_state import AvailabilityState
    from src.models.content_snapshot import ContentSnapshot
    from src.models.monitor_target import MonitorTarget
    from src.models.transition_event import TransitionEvent


class TargetLookupProtocol(Protocol):
    """Lookup of monitored targets, owned by the account system."""

    def get_target(self, target_id: int) -> MonitorTarget | None: ...


class AvailabilityStateStoreProtocol(Protocol):
    """Persistence for the one-row-per-target availability state."""

    def get_state(self, target_id: int) -> AvailabilityState | None: ...

    def upsert_state(self, state: AvailabilityState) -> None: ...


class TransitionEventStoreProtocol(Protocol):
    """Append-only persistence for confirmed transitions."""

    def append_transition(self, event: TransitionEvent) -> TransitionEvent: ...


class SnapshotStoreProtocol(Protocol):
    """Persistence for the per-target content snapshot chain."""

    def get_latest_snapshot(self, target_id: int) -> ContentSnapshot | None: ...

    def append_snapshot(self, snapshot: ContentSnapshot) -> ContentSnapshot: ...
