"""Timing harness for the reduction engine.

Generates a noisy sine series, times repeated ``optimized_data`` queries and
tabulates the results per (series size, strategy) as a pandas DataFrame.
"""

import logging
import statistics
import time
from dataclasses import asdict, dataclass
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from lodview.engine import ReductionEngine
from lodview.schemas import InternalConfig
from lodview.schemas.options import parse_strategy, strategy_label

__all__ = [
    'BenchmarkResult',
    'generate_test_data',
    'measure_render_time',
    'run_benchmark_suite',
]

logger = logging.getLogger(__name__)


def generate_test_data(count: int, seed: Optional[int] = None) -> List[Tuple[float, float]]:
    """``count`` points of ``y = sin(x / 100) * 50 + U(-10, 10) + 50``, x = 0..count-1."""
    rng = np.random.default_rng(seed)
    x = np.arange(count, dtype=float)
    y = np.sin(x / 100.0) * 50.0 + rng.uniform(-10.0, 10.0, size=count) + 50.0
    return list(zip(x.tolist(), y.tolist()))


@dataclass(frozen=True)
class BenchmarkResult:
    """Timing statistics for one benchmark run (seconds)."""
    data_count: int
    iterations: int
    average_time: float
    median_time: float
    min_time: float
    max_time: float
    fps: float

    @property
    def summary(self) -> str:
        return "\n".join([
            "Benchmark Results:",
            f"- Data Points: {self.data_count}",
            f"- Iterations: {self.iterations}",
            f"- Average: {self.average_time * 1000:.3f}ms",
            f"- Median: {self.median_time * 1000:.3f}ms",
            f"- Min: {self.min_time * 1000:.3f}ms",
            f"- Max: {self.max_time * 1000:.3f}ms",
            f"- Estimated FPS: {self.fps:.1f}",
        ])

    def as_dict(self) -> dict:
        return asdict(self)


def measure_render_time(engine: ReductionEngine, data_count: Optional[int] = None,
                        iterations: int = 10, target_points: int = 1000,
                        clock: Callable[[], float] = time.perf_counter) -> BenchmarkResult:
    """Time ``iterations`` calls of ``engine.optimized_data(target_points=...)``.

    Parameters
    ----------
    engine : ReductionEngine
        Engine already holding the series to query.
    data_count : int, optional
        Reported series size. Defaults to ``engine.original_count``.
    iterations : int
        Number of timed queries, >= 1.
    target_points : int
        Requested size per query.
    clock : callable, optional
        Seconds clock.

    Returns
    -------
    BenchmarkResult
        ``fps`` is ``1 / average_time`` (``inf`` when the average is 0).
    """
    if iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}")
    if data_count is None:
        data_count = engine.original_count

    times = []
    for _ in range(iterations):
        started = clock()
        engine.optimized_data(target_points=target_points)
        times.append(clock() - started)

    average = sum(times) / len(times)
    return BenchmarkResult(
        data_count=data_count,
        iterations=iterations,
        average_time=average,
        median_time=statistics.median(times),
        min_time=min(times),
        max_time=max(times),
        fps=1.0 / average if average > 0 else float("inf"),
    )


def run_benchmark_suite(config: InternalConfig,
                        counts: Optional[Iterable[int]] = None,
                        strategies: Optional[Iterable] = None,
                        iterations: Optional[int] = None,
                        target_points: Optional[int] = None,
                        seed: Optional[int] = 0) -> pd.DataFrame:
    """Benchmark every (count, strategy) pair.

    Defaults come from ``config.benchmark`` and ``config.sampling.strategy``.

    Returns
    -------
    pandas.DataFrame
        One row per pair with columns ``count``, ``strategy``, ``iterations``,
        ``average_ms``, ``median_ms``, ``min_ms``, ``max_ms``, ``fps`` and
        ``cache_bytes``.
    """
    counts = list(counts) if counts is not None else list(config.benchmark.counts)
    if strategies is None:
        strategies = [config.sampling.strategy]
    strategies = [parse_strategy(s) for s in strategies]
    if iterations is None:
        iterations = config.benchmark.iterations
    if target_points is None:
        target_points = config.benchmark.target_points

    rows = []
    for count in counts:
        data = generate_test_data(count, seed=seed)
        for strategy in strategies:
            label = strategy_label(strategy)
            engine = ReductionEngine(config, data=data)
            try:
                engine.sampling_strategy = strategy
                result = measure_render_time(engine, count, iterations, target_points)
                cache_bytes = engine.metrics.memory_usage
            finally:
                engine.close()

            logger.info("count=%d strategy=%s avg=%.3fms fps=%.1f",
                        count, label, result.average_time * 1000, result.fps)
            rows.append({
                "count": count,
                "strategy": label,
                "iterations": result.iterations,
                "average_ms": result.average_time * 1000,
                "median_ms": result.median_time * 1000,
                "min_ms": result.min_time * 1000,
                "max_ms": result.max_time * 1000,
                "fps": result.fps,
                "cache_bytes": cache_bytes,
            })

    return pd.DataFrame(rows, columns=[
        "count", "strategy", "iterations", "average_ms", "median_ms",
        "min_ms", "max_ms", "fps", "cache_bytes",
    ])
