"""Per-target mutual exclusion for evaluations."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator


class TargetLockRegistry:
    """Hands out one lock per target so at most one evaluation per target is in flight.

    Evaluations for different targets never contend on these locks. Locks are
    never evicted, so the registry holds one entry per target id seen; size it
    for a bounded target set.
    """

    def __init__(self) -> None:
        self._locks: dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, target_id: int) -> threading.Lock:
        """Return the lock for a target, creating it on first use."""
        with self._guard:
            lock = self._locks.get(target_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[target_id] = lock
            return lock

    @contextmanager
    def hold(self, target_id: int) -> Generator[None, None, None]:
        """Hold the target's lock for the duration of the block."""
        with self.lock_for(target_id):
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
