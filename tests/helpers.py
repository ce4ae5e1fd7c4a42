from __future__ import annotations

import threading


class StepClock:
    """Deterministic clock: every read advances the calling thread's time by ``step`` ns."""

    def __init__(self, step: int = 1000):
        self.step = step
        self._local = threading.local()

    def now(self) -> int:
        value = getattr(self._local, "value", 0) + self.step
        self._local.value = value
        return value

    def elapsed(self, start: int, end: int) -> int:
        return max(0, end - start)


class BackwardsClock:
    """Clock whose readings go backwards and whose deltas are not clamped."""

    def __init__(self):
        self.value = 10_000

    def now(self) -> int:
        self.value -= 500
        return self.value

    def elapsed(self, start: int, end: int) -> int:
        return end - start
