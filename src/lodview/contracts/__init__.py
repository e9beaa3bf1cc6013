"""Contracts - fail-fast enforcement of component invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate caller and component correctness
- Empty inputs are handled by the algorithms, not raised
"""

from lodview.contracts.failure import ContractViolation, FailurePolicy
from lodview.contracts.base import require
from lodview.contracts.reduction import assert_reduced, assert_target_points
from lodview.contracts.window import assert_window_bounded

__all__ = [
    "ContractViolation",
    "FailurePolicy",
    "require",
    "assert_target_points",
    "assert_reduced",
    "assert_window_bounded",
]
