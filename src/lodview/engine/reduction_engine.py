"""Level-of-detail reduction engine.

Owns one raw series, the active sampling strategy, a LOD cache and an
optional spatial index, and answers two query shapes: ladder-cached
reductions of an index range and per-pixel reductions of an x-viewport.
"""

import logging
import queue
import time
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from lodview.contracts import assert_reduced, assert_target_points, require
from lodview.engine.lod_cache import LODCache
from lodview.engine.metrics import RenderMetrics
from lodview.engine.precompute import LODPrecomputer, PrecomputedLevel
from lodview.sampling import reduce
from lodview.schemas import InternalConfig
from lodview.schemas.options import SamplingStrategy, parse_strategy, strategy_label
from lodview.spatial import Bounds, IndexBuildResult, SpatialGrid, SpatialIndexBuilder
from lodview.spatial.grid_index import Point

__all__ = ['ReductionEngine']

logger = logging.getLogger(__name__)

RangeLike = Union[range, slice, Tuple[int, int], None]


class ReductionEngine:
    """Serves render-sized views of a series far larger than the display.

    **Query shapes:**

    1. ``optimized_data(range, target_points)``: slices the raw series,
       maps ``target_points`` to the nearest rung of the LOD ladder and
       serves the reduction for that rung from the cache (computing and
       memoizing it on a miss).

    2. ``data_for_viewport(min_x, max_x, pixel_width, accessor)``: keeps the
       elements whose x lies in ``[min_x, max_x]`` and reduces them to at most
       one point per pixel. Never cached.

    **Background work:**

    Series longer than ``eager_threshold`` get every ladder level reduced by
    a ``LODPrecomputer`` thread, and ``build_spatial_index`` runs a
    ``SpatialIndexBuilder`` thread. Workers never touch engine state. They
    put results on ``self._results``; the engine drains that queue at the
    start of every query and adopts results whose generation is current.

    **Threading:**

    All public methods belong to one owning thread (the UI or publishing
    loop). Only the worker threads run concurrently with it.

    Example usage::

        config = resolve_config(ParamConfig(), UserConfig(strategy="lttb"))
        engine = ReductionEngine(config, data=samples)

        points = engine.optimized_data(target_points=1000)
        visible = engine.data_for_viewport(0.0, 50.0, pixel_width=800,
                                           value_accessor=lambda p: p)

        engine.build_spatial_index(lambda p: p, Bounds(0, 0, 100, 100))
        engine.wait_for_spatial_index()
        engine.points_near((10.0, 12.0), radius=2.0)
    """

    def __init__(self, config: InternalConfig, data: Sequence = (),
                 clock: Callable[[], float] = time.perf_counter):
        """Initialize the engine with validated configuration.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration. Uses ``config.sampling``
            and ``config.spatial``.
        data : sequence, optional
            Initial raw series. Replace later with ``set_data``.
        clock : callable, optional
            Monotonic clock in seconds used for query timing.
        """
        self.config = config
        self.lod_levels = config.sampling.lod_levels
        self.eager_threshold = config.sampling.eager_threshold
        self.default_target_points = config.sampling.default_target_points
        self.grid_size = config.spatial.grid_size

        self._strategy = config.sampling.strategy
        self._clock = clock

        self.metrics = RenderMetrics()
        self._cache = LODCache(self.lod_levels)
        self._subscribers: List[Callable[[RenderMetrics], None]] = []

        # Worker -> owner handoff
        self._results: queue.Queue = queue.Queue()
        self._precomputer: Optional[LODPrecomputer] = None
        self._index_builder: Optional[SpatialIndexBuilder] = None

        self._index_generation = 0
        self._spatial_index: Optional[SpatialGrid] = None
        self._spatial_error: Optional[BaseException] = None

        self._data: Sequence = ()
        self._install(data)

    # ------------------------------------------------------------------
    # Data and strategy
    # ------------------------------------------------------------------
    @property
    def data(self) -> Sequence:
        """The raw series (read-only)."""
        return self._data

    @property
    def original_count(self) -> int:
        return len(self._data)

    @property
    def sampling_strategy(self) -> SamplingStrategy:
        return self._strategy

    @sampling_strategy.setter
    def sampling_strategy(self, strategy) -> None:
        strategy = parse_strategy(strategy)
        if strategy == self._strategy:
            return
        logger.info("Sampling strategy: %s -> %s",
                    strategy_label(self._strategy), strategy_label(strategy))
        self._strategy = strategy
        self._cache.invalidate()
        self._schedule_precompute()

    def set_data(self, data: Sequence) -> None:
        """Replace the raw series wholesale.

        Drops every cached level and any spatial index built from the old
        data, then restarts eager precomputation if the new series is large.
        """
        self._stop_workers()
        self._spatial_index = None
        self._spatial_error = None
        self._index_generation += 1
        self._install(data)

    def _install(self, data: Sequence) -> None:
        if isinstance(data, np.ndarray):
            frozen = data.copy()
            frozen.setflags(write=False)
            self._data = frozen
        else:
            self._data = tuple(data)
        self._cache.invalidate()
        logger.debug("Engine data set: %d points", len(self._data))
        self._schedule_precompute()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def optimized_data(self, range: RangeLike = None,
                       target_points: Optional[int] = None) -> Sequence:
        """Reduced view of ``range`` (default: the whole series).

        Parameters
        ----------
        range : range, slice or (start, stop), optional
            Index range of the raw series. Step must be 1.
        target_points : int, optional
            Requested size, >= 2. Defaults to ``sampling.default_target_points``.

        Returns
        -------
        sequence
            The slice itself if it already has <= ``target_points`` elements.
            Otherwise the reduction for the nearest LOD rung: ``level`` points
            when that rung is shorter than the slice, else a direct reduction
            to ``target_points`` (not cached).

        Raises
        ------
        ContractViolation
            If target_points < 2 or the range has a step other than 1
        """
        if target_points is None:
            target_points = self.default_target_points
        assert_target_points(target_points)

        started = self._clock()
        try:
            self._collect_results()
            start, stop = self._resolve_range(range)
            data_slice = self._data[start:stop]

            if len(data_slice) <= target_points:
                return data_slice

            level = self._cache.level_for(target_points)
            if level >= len(data_slice):
                return self._reduce(data_slice, target_points)

            key = (start, stop, level)
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            reduced = self._reduce(data_slice, level)
            self._cache.put(key, reduced)
            return reduced
        finally:
            self._record_query(self._clock() - started)

    def data_for_viewport(self, min_x: float, max_x: float, pixel_width: float,
                          value_accessor: Callable[[object], Point],
                          target_points: Optional[int] = None) -> Sequence:
        """Elements with x in ``[min_x, max_x]``, reduced to about one per pixel.

        Parameters
        ----------
        min_x, max_x : float
            Visible x range (inclusive).
        pixel_width : float
            Viewport width in pixels.
        value_accessor : callable
            Maps an element to its ``(x, y)`` location.
        target_points : int, optional
            Override for the point budget. Defaults to ``int(pixel_width)``.

        Raises
        ------
        ContractViolation
            If the point budget is < 2
        """
        if target_points is None:
            target_points = int(pixel_width)
        assert_target_points(target_points)

        started = self._clock()
        try:
            self._collect_results()
            visible = tuple(
                element for element in self._data
                if min_x <= value_accessor(element)[0] <= max_x
            )
            if len(visible) <= target_points:
                return visible
            return self._reduce(visible, target_points)
        finally:
            self._record_query(self._clock() - started)

    def cached_levels(self) -> List[int]:
        """Ladder levels currently cached for the whole series."""
        self._collect_results()
        return self._cache.levels_for_range(0, len(self._data))

    # ------------------------------------------------------------------
    # Spatial index
    # ------------------------------------------------------------------
    def build_spatial_index(self, value_accessor: Callable[[object], Point],
                            bounds: Optional[Bounds] = None,
                            background: bool = True) -> Optional[SpatialIndexBuilder]:
        """Index every raw element at ``value_accessor(element)``.

        Parameters
        ----------
        value_accessor : callable
            Maps an element to its ``(x, y)`` location.
        bounds : Bounds, optional
            Grid rectangle. Defaults to the bounding box of the data.
        background : bool, optional
            Build on a ``SpatialIndexBuilder`` thread (default). With False
            the index is built and adopted before returning.

        Returns
        -------
        SpatialIndexBuilder or None
            The running builder when ``background`` is True.
        """
        if self._index_builder is not None:
            self._index_builder.stop()
            self._index_builder = None
        self._spatial_index = None
        self._spatial_error = None
        self._index_generation += 1

        if bounds is None:
            if len(self._data) == 0:
                bounds = Bounds(0.0, 0.0, 1.0, 1.0)
            else:
                bounds = Bounds.from_points(value_accessor(element) for element in self._data)

        if not background:
            grid = SpatialGrid(bounds, self.grid_size)
            grid.insert_all(self._data, value_accessor)
            self._spatial_index = grid
            return None

        self._index_builder = SpatialIndexBuilder(
            self._data, value_accessor, bounds, self.grid_size,
            result_queue=self._results,
            generation=self._index_generation,
        )
        self._index_builder.start()
        return self._index_builder

    @property
    def spatial_index_ready(self) -> bool:
        self._collect_results()
        return self._spatial_index is not None

    def wait_for_spatial_index(self, timeout: Optional[float] = None) -> bool:
        """Block until a background build finishes; returns readiness."""
        if self._index_builder is not None:
            self._index_builder.join(timeout)
        return self.spatial_index_ready

    def points_near(self, location: Point, radius: float) -> list:
        """Raw elements within ``radius`` of ``location``.

        Returns an empty list while the index is not yet available.

        Raises
        ------
        Exception
            The error that stopped the last background build, if any
        """
        self._collect_results()
        if self._spatial_error is not None:
            raise self._spatial_error
        if self._spatial_index is None:
            return []
        return self._spatial_index.query(location, radius)

    # ------------------------------------------------------------------
    # Background precompute
    # ------------------------------------------------------------------
    @property
    def precompute_running(self) -> bool:
        return self._precomputer is not None and self._precomputer.is_alive()

    def wait_for_precompute(self, timeout: Optional[float] = None) -> bool:
        """Block until eager precomputation finishes; adopt what it produced.

        Returns True when no precompute is still running.
        """
        if self._precomputer is not None:
            self._precomputer.join(timeout)
        self._collect_results()
        return not self.precompute_running

    def _schedule_precompute(self) -> None:
        if self._precomputer is not None:
            self._precomputer.stop()
            self._precomputer = None

        if len(self._data) <= self.eager_threshold:
            return

        logger.info("Eager LOD precompute for %d points (levels %s)",
                    len(self._data), list(self.lod_levels))
        self._precomputer = LODPrecomputer(
            self._data, self._strategy, self.lod_levels,
            result_queue=self._results,
            generation=self._cache.generation,
        )
        self._precomputer.start()

    # ------------------------------------------------------------------
    # Lifecycle and notifications
    # ------------------------------------------------------------------
    def subscribe(self, callback: Callable[[RenderMetrics], None]) -> None:
        """Call ``callback(metrics_snapshot)`` after every query."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[RenderMetrics], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def reset(self) -> None:
        """Clear the LOD cache, metrics and spatial index."""
        self._stop_workers()
        self._cache.invalidate()
        self._index_generation += 1
        self._spatial_index = None
        self._spatial_error = None
        self.metrics.reset()
        logger.debug("Engine reset")

    def close(self) -> None:
        """Stop background workers. Safe to call multiple times."""
        self._stop_workers()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _stop_workers(self) -> None:
        for worker in (self._precomputer, self._index_builder):
            if worker is not None:
                worker.stop()
        self._precomputer = None
        self._index_builder = None

    def _resolve_range(self, data_range: RangeLike) -> Tuple[int, int]:
        n = len(self._data)
        if data_range is None:
            return 0, n
        if isinstance(data_range, range):
            require(data_range.step == 1,
                    f"Range contract violated: step must be 1, got {data_range.step}")
            data_range = slice(data_range.start, data_range.stop)
        elif isinstance(data_range, tuple):
            require(len(data_range) == 2,
                    f"Range contract violated: expected (start, stop), got {data_range!r}")
            data_range = slice(*data_range)
        start, stop, step = data_range.indices(n)
        require(step == 1, f"Range contract violated: step must be 1, got {step}")
        return start, max(start, stop)

    def _reduce(self, series: Sequence, target_points: int) -> Sequence:
        reduced = reduce(series, target_points, self._strategy)
        if reduced is not series:
            assert_reduced(series, reduced, target_points)
        return reduced

    def _collect_results(self) -> None:
        """Adopt worker results published since the last query."""
        while True:
            try:
                message = self._results.get_nowait()
            except queue.Empty:
                return

            if isinstance(message, PrecomputedLevel):
                if message.generation != self._cache.generation:
                    logger.debug("Dropping stale LOD level %d (generation %d)",
                                 message.level, message.generation)
                    continue
                key = (0, len(self._data), message.level)
                if key not in self._cache:
                    self._cache.put(key, message.reduced)

            elif isinstance(message, IndexBuildResult):
                if message.generation != self._index_generation:
                    logger.debug("Dropping stale spatial index (generation %d)",
                                 message.generation)
                    continue
                if message.ok:
                    self._spatial_index = message.grid
                else:
                    self._spatial_error = message.error
                self._index_builder = None

    def _record_query(self, elapsed: float) -> None:
        self.metrics.record(elapsed)
        self.metrics.memory_usage = self._cache.memory_usage
        if not self._subscribers:
            return
        snapshot = self.metrics.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error("Metrics subscriber %r failed: %s", callback, e, exc_info=True)
