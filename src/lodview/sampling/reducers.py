"""Sampling strategy library.

Pure functions mapping ``(series, target_count, strategy)`` to a reduced
series. Every reducer is deterministic and keeps no state, so reducers can
run concurrently on different inputs (the eager LOD precompute thread relies
on this).

Index selection is done with NumPy; element gathering keeps the caller's
element type, so a series of tuples comes back as a tuple of the same tuples
and a NumPy array comes back as an array.

Strategies
----------
- ``NoSampling``: identity.
- ``UniformSampling``: ``floor(i * n / k)`` for ``i`` in ``[0, k)`` with the
  last slot overwritten by the last source element.
- ``LTTBSampling``: first, the midpoint of ``buckets - 2`` inner buckets,
  last. Midpoint selection, not triangle-area maximization.
- ``MinMaxSampling``: first, the midpoint of each bucket of size
  ``n // (k // 2)``, last.
- ``AdaptiveSampling``: uniform fallback; ``threshold`` is not used yet.
"""

import logging
from typing import Sequence, TypeVar

import numpy as np

from lodview.contracts import assert_target_points
from lodview.schemas.options import (
    AdaptiveSampling,
    LTTBSampling,
    MinMaxSampling,
    NoSampling,
    SamplingStrategy,
    UniformSampling,
)

__all__ = [
    'reduce',
    'uniform_indices',
    'lttb_indices',
    'minmax_indices',
    'take',
]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def uniform_indices(length: int, target_count: int) -> np.ndarray:
    """Indices of a uniform reduction of ``length`` points to ``target_count``.

    The stride may already have picked an index near the end; the final slot
    is still forced to ``length - 1`` so the last point is always kept.
    """
    indices = np.arange(target_count, dtype=np.int64) * length // target_count
    indices[-1] = length - 1
    return indices


def lttb_indices(length: int, buckets: int) -> np.ndarray:
    """Indices selected by the bucket-midpoint LTTB variant.

    The inner range is split into ``buckets - 2`` contiguous buckets of
    ``length / buckets`` points; each contributes its midpoint index.
    """
    inner = np.arange(1, buckets - 1, dtype=np.int64)
    starts = inner * length // buckets
    ends = np.minimum((inner + 1) * length // buckets, length)
    mids = (starts + ends) // 2
    return np.concatenate(([0], mids, [length - 1]))


def minmax_indices(length: int, target_count: int) -> np.ndarray:
    """Indices selected by bucketed min/max sampling.

    Walks the series in buckets of ``length // (target_count // 2)`` points
    and emits each bucket's midpoint. At most ``target_count - 2`` midpoints
    are kept so the anchored output never exceeds ``target_count``.
    """
    bucket_size = max(1, length // max(1, target_count // 2))
    starts = np.arange(0, length, bucket_size, dtype=np.int64)
    ends = np.minimum(starts + bucket_size, length)
    mids = ((starts + ends) // 2)[:target_count - 2]
    return np.concatenate(([0], mids, [length - 1]))


def take(series: Sequence[T], indices: np.ndarray) -> Sequence[T]:
    """Gather ``series[indices]`` keeping the container type sensible."""
    if isinstance(series, np.ndarray):
        return series[indices]
    return tuple(series[i] for i in indices.tolist())


def reduce(series: Sequence[T], target_count: int, strategy: SamplingStrategy) -> Sequence[T]:
    """Reduce ``series`` to at most ``target_count`` representative points.

    Parameters
    ----------
    series : sequence
        Ordered source series. Never modified.
    target_count : int
        Upper bound on the output size. Must be >= 2.
    strategy : SamplingStrategy
        Variant selecting the algorithm.

    Returns
    -------
    sequence
        ``series`` itself when no reduction is needed (``NoSampling`` or
        ``len(series) <= target_count``), otherwise a new series whose first
        and last elements are the source's first and last elements.

    Raises
    ------
    ContractViolation
        If target_count < 2

    Examples
    --------
    >>> out = reduce(list(range(1000)), 100, UniformSampling())
    >>> len(out), out[0], out[-1]
    (100, 0, 999)
    """
    assert_target_points(target_count)

    length = len(series)
    if isinstance(strategy, NoSampling) or length <= target_count:
        return series

    if isinstance(strategy, UniformSampling):
        indices = uniform_indices(length, target_count)
    elif isinstance(strategy, LTTBSampling):
        indices = lttb_indices(length, min(strategy.buckets, target_count))
    elif isinstance(strategy, MinMaxSampling):
        indices = minmax_indices(length, target_count)
    elif isinstance(strategy, AdaptiveSampling):
        # Variance-driven density not implemented; threshold unused
        indices = uniform_indices(length, target_count)
    else:
        raise TypeError(f"Unsupported sampling strategy: {strategy!r}")

    logger.debug("Reduced %d -> %d points (%s)", length, len(indices), strategy.kind)
    return take(series, indices)
