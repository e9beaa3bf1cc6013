"""Streaming window contract.

The published window never exceeds the configured size.
"""

from typing import Sequence

from lodview.contracts.base import require


def assert_window_bounded(window: Sequence, window_size: int) -> None:
    """Enforce |window| <= window_size after every flush or replace.

    Raises
    ------
    ContractViolation
        If the window grew past its bound
    """
    require(
        len(window) <= window_size,
        f"Window contract violated: {len(window)} values exceeds window_size {window_size}"
    )
