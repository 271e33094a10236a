"""Session time budget tracking."""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class SessionClock:
    """Elapsed/remaining time against a fixed session budget.

    ``now`` must return seconds from a monotonic source. Elapsed time never
    decreases, even if the injected source steps backwards.
    """

    def __init__(self, budget_seconds: int, now: Optional[Callable[[], float]] = None):
        if budget_seconds <= 0:
            raise ValueError("budget_seconds must be positive")
        self.budget_seconds = budget_seconds
        self._now = now or time.monotonic
        self.started_at = self._now()
        self._high_water = 0.0
        self._guard = threading.Lock()

    def elapsed(self) -> float:
        sample = max(0.0, self._now() - self.started_at)
        with self._guard:
            if sample > self._high_water:
                self._high_water = sample
            return self._high_water

    def remaining(self) -> float:
        return self.budget_seconds - self.elapsed()

    def expired(self) -> bool:
        return self.remaining() <= 0


__all__ = ["SessionClock"]
