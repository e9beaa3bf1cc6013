"""Level-of-detail cache.

Maps ``(start, stop, level)`` to a reduced series. ``start``/``stop`` is the
slice of the raw series that was reduced (``(0, n)`` for the whole series)
and ``level`` is a rung of the fixed LOD ladder.

The cache is owned by a single thread. Background producers never touch
it; they publish messages stamped with ``generation`` and the owner stores
them only if the generation still matches. ``invalidate()`` drops every
entry and bumps the generation, so no stale level can survive a data or
strategy change.
"""

import sys
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

__all__ = ['LODCache', 'LODKey']

LODKey = Tuple[int, int, int]


def _estimate_bytes(series: Sequence) -> int:
    if isinstance(series, np.ndarray):
        return int(series.nbytes)
    return sys.getsizeof(series)


class LODCache:
    """Reduced series memoized per detail level."""

    def __init__(self, levels: Sequence[int]):
        self.levels = tuple(sorted(levels))
        self.generation = 0
        self._entries: Dict[LODKey, Sequence] = {}
        self._bytes = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: LODKey) -> bool:
        return key in self._entries

    def level_for(self, target_points: int) -> int:
        """Ladder rung nearest to ``target_points`` (ties go to the smaller rung)."""
        return min(self.levels, key=lambda level: (abs(level - target_points), level))

    def get(self, key: LODKey) -> Optional[Sequence]:
        return self._entries.get(key)

    def put(self, key: LODKey, reduced: Sequence) -> None:
        previous = self._entries.get(key)
        if previous is not None:
            self._bytes -= _estimate_bytes(previous)
        self._entries[key] = reduced
        self._bytes += _estimate_bytes(reduced)

    def invalidate(self) -> int:
        """Drop all entries and start a new generation. Returns the new generation."""
        self._entries.clear()
        self._bytes = 0
        self.generation += 1
        return self.generation

    def levels_for_range(self, start: int, stop: int) -> list:
        """Sorted levels cached for the slice ``[start, stop)``."""
        return sorted(level for (s, e, level) in self._entries if (s, e) == (start, stop))

    @property
    def memory_usage(self) -> int:
        """Estimated bytes held by cached series."""
        return self._bytes
