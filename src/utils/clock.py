"""
Clock and id capabilities injected into the market making core.

The core never reads the wall clock or invents identifiers on its own; it is
handed an object with ``now()`` and one with ``next_id()``.
"""

import itertools
import time
import uuid


class SystemClock:
    """Monotonic clock reporting milliseconds"""

    def now(self) -> float:
        return time.monotonic() * 1000.0


class ManualClock:
    """Clock driven by the caller (replays, simulations, tests)"""

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, delta: float) -> float:
        if delta < 0:
            raise ValueError(f"Clock cannot move backwards: {delta}")
        self._now += delta
        return self._now

    def set(self, value: float) -> None:
        if value < self._now:
            raise ValueError(f"Clock cannot move backwards: {value} < {self._now}")
        self._now = float(value)


class UuidIdGenerator:
    """Random 128-bit hex identifiers"""

    def next_id(self) -> str:
        return uuid.uuid4().hex


class SequentialIdGenerator:
    """Deterministic ``prefix-1``, ``prefix-2``, ... identifiers"""

    def __init__(self, prefix: str = 'id'):
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next_id(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
