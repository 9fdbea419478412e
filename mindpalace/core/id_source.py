"""Id Source - creation-time ids that never collide within a collection.

Invariants:
    - next_id() is strictly increasing for one IdSource instance
    - next_id(taken) is never a member of taken
    - Ids stay close to epoch milliseconds, matching records created before this scheme

Design Decisions:
    - Clock injected as a callable so tests can freeze time
"""

import time
from collections.abc import Callable, Iterable


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class IdSource:
    """Monotonic millisecond id generator."""

    def __init__(self, clock: Callable[[], int] | None = None):
        self._clock = clock or _epoch_millis
        self._last = 0

    def next_id(self, taken: Iterable[int] = ()) -> int:
        """Next id: now, bumped past the last id issued and every id in taken."""
        candidate = max(self._clock(), self._last + 1, max(taken, default=0) + 1)
        self._last = candidate
        return candidate
