"""Arrival-rate measurement over a trailing time window."""

from collections import deque
from typing import Optional


class RateTracker:
    """Counts arrivals in the trailing ``window_seconds``.

    Timestamps older than the window are pruned on every ``record``, so the
    deque never holds more than one window's worth of arrivals. Not
    thread-safe on its own; the streaming buffer guards it with its ingest lock.
    """

    __slots__ = ("window_seconds", "_timestamps", "_last_seen")

    def __init__(self, window_seconds: float = 1.0):
        self.window_seconds = window_seconds
        self._timestamps = deque()
        self._last_seen: Optional[float] = None

    def __len__(self) -> int:
        return len(self._timestamps)

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        timestamps = self._timestamps
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

    def record(self, now: float, count: int = 1) -> None:
        """Register ``count`` arrivals at time ``now`` (seconds)."""
        self._timestamps.extend([now] * count)
        self._last_seen = now
        self._prune(now)

    def count(self, now: float) -> int:
        """Arrivals within ``(now - window_seconds, now]``."""
        self._prune(now)
        return len(self._timestamps)

    def rate(self, now: float) -> float:
        """Arrivals per second over the trailing window."""
        return self.count(now) / self.window_seconds

    def clear(self) -> None:
        self._timestamps.clear()
        self._last_seen = None

    @property
    def last_seen(self) -> Optional[float]:
        """Time of the most recent arrival, or None."""
        return self._last_seen
