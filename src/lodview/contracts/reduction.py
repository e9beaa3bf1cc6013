"""Reduction contracts.

Enforce the caller side (target count) and the producer side (bounded
output, anchor points) of a reduction.
"""

import math
from numbers import Integral
from typing import Sequence

import numpy as np

from lodview.contracts.base import require


def assert_target_points(target_points: int) -> None:
    """Enforce the caller contract of every reduction entry point.

    Raises
    ------
    ContractViolation
        If target_points is not an integer >= 2
    """
    require(
        isinstance(target_points, Integral) and not isinstance(target_points, bool),
        f"Reduction contract violated: target_points must be an int, got {type(target_points).__name__}"
    )
    require(
        target_points >= 2,
        f"Reduction contract violated: target_points must be >= 2, got {target_points}"
    )


def assert_reduced(source: Sequence, reduced: Sequence, target_points: int) -> None:
    """Enforce the output contract of an anchored reduction.

    Only applies when a strategy actually reduced (source longer than
    target_points and strategy other than identity).

    Parameters
    ----------
    source : sequence
        Series handed to the strategy
    reduced : sequence
        Strategy output
    target_points : int
        Requested bound

    Raises
    ------
    ContractViolation
        If the output exceeds the bound or dropped an anchor point
    """
    require(
        len(reduced) <= max(target_points, 2),
        f"Reduction contract violated: {len(reduced)} points exceeds target {target_points}"
    )
    require(
        len(reduced) >= 2,
        f"Reduction contract violated: anchored output needs 2 points, got {len(reduced)}"
    )
    require(
        reduced[0] is source[0] or _same(reduced[0], source[0]),
        "Reduction contract violated: first point not preserved"
    )
    require(
        reduced[-1] is source[-1] or _same(reduced[-1], source[-1]),
        "Reduction contract violated: last point not preserved"
    )


def _same(a, b) -> bool:
    """Element equality where NaN matches NaN (gap markers are valid anchors)."""
    if isinstance(a, (np.ndarray, np.generic)) or isinstance(b, (np.ndarray, np.generic)):
        a, b = np.asarray(a), np.asarray(b)
        floating = a.dtype.kind in "fc" and b.dtype.kind in "fc"
        return bool(np.array_equal(a, b, equal_nan=floating))
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    return bool(a == b)
