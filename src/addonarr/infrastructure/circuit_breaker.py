"""Per-addon circuit breaker for stream searches.

An addon that fails ``failure_threshold`` searches in a row (network
error, timeout, non-2xx) is skipped for ``cooldown_seconds``.  An addon
that answers, even with no streams, counts as healthy.  Once the cooldown
is over one trial search is let through; success closes the breaker,
failure restarts the cooldown.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class BreakerState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class _Entry:
    failures: int = 0
    state: BreakerState = BreakerState.CLOSED
    opened_at: float = 0.0


class AddonCircuitBreaker:
    """Failure bookkeeping keyed by addon id.

    Not thread-safe; all mutation happens on the event loop thread.
    """

    def __init__(
        self,
        *,
        failure_threshold: int = 5,
        cooldown_seconds: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._threshold = failure_threshold
        self._cooldown = cooldown_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def allow(self, addon_id: str) -> bool:
        """Return ``True`` if *addon_id* may be queried now."""
        entry = self._entries.get(addon_id)
        if entry is None or entry.state is not BreakerState.OPEN:
            return True
        if self._clock() - entry.opened_at >= self._cooldown:
            entry.state = BreakerState.HALF_OPEN
            return True
        return False

    def record_success(self, addon_id: str) -> None:
        self._entries.pop(addon_id, None)

    def record_failure(self, addon_id: str) -> None:
        """Count a failed search; open the breaker at the threshold.

        A failed half-open trial reopens immediately.
        """
        entry = self._entries.setdefault(addon_id, _Entry())
        if entry.state is BreakerState.HALF_OPEN:
            entry.state = BreakerState.OPEN
            entry.opened_at = self._clock()
            return

        entry.failures += 1
        if entry.failures >= self._threshold:
            entry.state = BreakerState.OPEN
            entry.opened_at = self._clock()

    def state(self, addon_id: str) -> BreakerState:
        entry = self._entries.get(addon_id)
        return entry.state if entry is not None else BreakerState.CLOSED

    def forget(self, addon_id: str) -> None:
        """Drop all bookkeeping for an addon (called when it is removed)."""
        self._entries.pop(addon_id, None)

    def snapshot(self) -> dict[str, dict[str, object]]:
        """Diagnostic view of every addon with recorded failures."""
        return {
            addon_id: {"state": entry.state.value, "failures": entry.failures}
            for addon_id, entry in sorted(self._entries.items())
        }
