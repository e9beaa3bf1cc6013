"""Background spatial index construction.

The builder populates a private ``SpatialGrid`` on a worker thread and hands
the finished grid to its owner through a queue. The owner adopts it the next
time it drains the queue, so a half-built grid is never visible to queries.
"""

import logging
import queue
import threading
from typing import Callable, Sequence

from lodview.spatial.grid_index import Bounds, Point, SpatialGrid

__all__ = ['SpatialIndexBuilder', 'IndexBuildResult']

logger = logging.getLogger(__name__)

# Elements inserted between stop-flag checks
_CHECK_EVERY = 4096


class IndexBuildResult:
    """Message published by the builder: a grid or the error that stopped it."""

    __slots__ = ("generation", "grid", "error")

    def __init__(self, generation: int, grid: SpatialGrid = None, error: BaseException = None):
        self.generation = generation
        self.grid = grid
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None


class SpatialIndexBuilder(threading.Thread):
    """Builds a spatial grid off the owner thread.

    Parameters
    ----------
    elements : sequence
        Complete raw series to index.
    value_accessor : callable
        Maps an element to its ``(x, y)`` location.
    bounds : Bounds
        Grid rectangle.
    grid_size : int
        Cells per axis.
    result_queue : queue.Queue
        Receives exactly one ``IndexBuildResult`` unless the builder is stopped.
    generation : int
        Data generation this build belongs to; stale results are dropped by
        the owner.
    """

    def __init__(self, elements: Sequence, value_accessor: Callable[[object], Point],
                 bounds: Bounds, grid_size: int, result_queue: queue.Queue,
                 generation: int = 0, name: str = "SpatialIndexBuilder"):
        super().__init__(daemon=True, name=name)
        self.elements = elements
        self.value_accessor = value_accessor
        self.bounds = bounds
        self.grid_size = grid_size
        self.result_queue = result_queue
        self.generation = generation
        self._stop_event = threading.Event()

    def stop(self):
        """Abandon the build; nothing is published afterwards."""
        self._stop_event.set()

    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self):
        logger.debug("Building spatial index for %d elements (generation %d)",
                     len(self.elements), self.generation)
        try:
            grid = SpatialGrid(self.bounds, self.grid_size)
            for i, element in enumerate(self.elements):
                if i % _CHECK_EVERY == 0 and self.stopped():
                    logger.debug("Spatial index build abandoned (generation %d)", self.generation)
                    return
                grid.insert(element, self.value_accessor(element))
        except Exception as e:
            logger.error("Spatial index build failed: %s", e, exc_info=True)
            self.result_queue.put(IndexBuildResult(self.generation, error=e))
            return

        if self.stopped():
            return
        self.result_queue.put(IndexBuildResult(self.generation, grid=grid))
        logger.info("Spatial index ready: %d points, %dx%d grid",
                    len(grid), self.grid_size, self.grid_size)
