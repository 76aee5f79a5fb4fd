"""Per-key wake-up slots for parent reconcile loops."""

from __future__ import annotations

import asyncio
from typing import Hashable, NamedTuple


class ParentKey(NamedTuple):
    """Identity of a ClusterExternalSecret. Cluster-scoped, so namespace is empty."""

    name: str
    namespace: str = ""


class ReconcileQueue:
    """Collapses reconcile triggers per key.

    Each key has one pending flag. Any number of ``enqueue`` calls before the
    owning loop wakes up result in a single extra cycle. All methods must be
    called from the event loop thread.
    """

    def __init__(self) -> None:
        self._slots: dict[Hashable, asyncio.Event] = {}

    def _slot(self, key: Hashable) -> asyncio.Event:
        slot = self._slots.get(key)
        if slot is None:
            slot = self._slots[key] = asyncio.Event()
        return slot

    def enqueue(self, key: Hashable) -> None:
        """Mark *key* as needing another cycle."""
        self._slot(key).set()

    def pending(self, key: Hashable) -> bool:
        return self._slot(key).is_set()

    async def wait(self, key: Hashable, timeout: float | None) -> bool:
        """Wait until *key* is triggered or *timeout* elapses.

        Args:
            key: Parent key
            timeout: Seconds to wait at most, or None to wait for a trigger only

        Returns:
            True if woken by a trigger, False on timeout
        """
        slot = self._slot(key)
        try:
            if timeout is None:
                await slot.wait()
            else:
                await asyncio.wait_for(slot.wait(), timeout=max(timeout, 0.0))
            triggered = True
        except asyncio.TimeoutError:
            triggered = False
        # The cycle about to run covers every trigger received so far
        slot.clear()
        return triggered

    def forget(self, key: Hashable) -> None:
        """Drop the slot for a parent that no longer exists."""
        self._slots.pop(key, None)
