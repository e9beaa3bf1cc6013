"""Sampling strategy library: pure series reducers."""

from lodview.sampling.reducers import (
    lttb_indices,
    minmax_indices,
    reduce,
    take,
    uniform_indices,
)

__all__ = ['reduce', 'uniform_indices', 'lttb_indices', 'minmax_indices', 'take']
