"""Eager LOD precomputation on a worker thread.

Large series get every ladder level reduced in the background. Each level is
published as soon as it is ready, so the owner may see some levels before
others; a cache miss for an unfinished level is normal.
"""

import logging
import queue
import threading
from typing import NamedTuple, Sequence

from lodview.sampling import reduce
from lodview.schemas.options import SamplingStrategy, strategy_label

__all__ = ['LODPrecomputer', 'PrecomputedLevel']

logger = logging.getLogger(__name__)


class PrecomputedLevel(NamedTuple):
    """One finished ladder level, stamped with the cache generation it belongs to."""
    generation: int
    level: int
    reduced: Sequence


class LODPrecomputer(threading.Thread):
    """Reduces ``data`` at every ladder level smaller than ``len(data)``.

    Parameters
    ----------
    data : sequence
        Immutable raw series (shared read-only with the owner).
    strategy : SamplingStrategy
        Strategy active when the precompute was requested.
    levels : sequence of int
        LOD ladder.
    result_queue : queue.Queue
        Receives one ``PrecomputedLevel`` per finished level.
    generation : int
        Cache generation at request time.
    """

    def __init__(self, data: Sequence, strategy: SamplingStrategy, levels: Sequence[int],
                 result_queue: queue.Queue, generation: int, name: str = "LODPrecomputer"):
        super().__init__(daemon=True, name=name)
        self.data = data
        self.strategy = strategy
        self.levels = tuple(sorted(levels))
        self.result_queue = result_queue
        self.generation = generation
        self._stop_event = threading.Event()
        self.completed_levels = []

    def stop(self):
        """Stop after the level currently being reduced."""
        self._stop_event.set()

    def run(self):
        pending = [level for level in self.levels if level < len(self.data)]
        logger.debug("Precomputing LOD levels %s for %d points using %s",
                     pending, len(self.data), strategy_label(self.strategy))

        for level in pending:
            if self._stop_event.is_set():
                logger.debug("LOD precompute stopped (generation %d)", self.generation)
                return
            try:
                reduced = reduce(self.data, level, self.strategy)
            except Exception as e:
                logger.error("LOD precompute failed at level %d: %s", level, e, exc_info=True)
                return
            self.result_queue.put(PrecomputedLevel(self.generation, level, reduced))
            self.completed_levels.append(level)

        logger.info("LOD precompute finished: %d levels (generation %d)",
                    len(self.completed_levels), self.generation)
