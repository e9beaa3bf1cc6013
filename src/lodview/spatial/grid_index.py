"""Uniform grid spatial index for radius queries over 2D points.

The index covers a fixed bounding rectangle split into ``grid_size`` x
``grid_size`` cells. Each cell stores indices into a flat record array, so a
radius query only scans the cells overlapping the query square and then
applies the exact circular test.

Points outside the bounds are clamped into the nearest edge cell. They are
still found by queries whose square reaches that edge cell.
"""

import logging
import math
from typing import Callable, Generic, Iterable, List, NamedTuple, Tuple, TypeVar

import numpy as np

from lodview.contracts import require

__all__ = ['Bounds', 'SpatialGrid', 'build_grid']

logger = logging.getLogger(__name__)

T = TypeVar("T")
Point = Tuple[float, float]


class Bounds(NamedTuple):
    """Axis-aligned rectangle: origin plus extent."""
    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.min_x + self.width

    @property
    def max_y(self) -> float:
        return self.min_y + self.height

    @classmethod
    def from_points(cls, points: Iterable[Point], padding: float = 0.0) -> "Bounds":
        """Smallest rectangle containing ``points``, grown by ``padding``.

        Degenerate extents (all points on a line) are widened to 1.0 so the
        grid geometry stays valid.
        """
        coords = np.asarray(list(points), dtype=np.float64)
        require(coords.ndim == 2 and len(coords) > 0, "Bounds contract violated: no points given")
        min_x, min_y = coords.min(axis=0) - padding
        max_x, max_y = coords.max(axis=0) + padding
        return cls(
            float(min_x),
            float(min_y),
            float(max_x - min_x) or 1.0,
            float(max_y - min_y) or 1.0,
        )


class SpatialGrid(Generic[T]):
    """Fixed-geometry cell grid answering "which elements lie within r of p".

    Insert everything first, then query. There is no delete; rebuilding
    means creating a new grid.

    Example usage::

        grid = SpatialGrid(Bounds(0, 0, 100, 100), grid_size=100)
        grid.insert("a", (10, 10))
        grid.insert("b", (90, 90))
        grid.query((10, 10), radius=5)   # ["a"]
    """

    def __init__(self, bounds: Bounds, grid_size: int = 100):
        require(grid_size >= 1, f"Spatial contract violated: grid_size must be >= 1, got {grid_size}")
        require(
            bounds.width > 0 and bounds.height > 0,
            f"Spatial contract violated: bounds must have positive extent, got {bounds}"
        )
        self.bounds = Bounds(*bounds)
        self.grid_size = grid_size

        self._elements: List[T] = []
        self._points: List[Point] = []
        self._cells: List[List[int]] = [[] for _ in range(grid_size * grid_size)]

        # Cached (n, 2) coordinate array, invalidated on insert
        self._coords = None

    def __len__(self) -> int:
        return len(self._elements)

    def _cell_coord(self, value: float, origin: float, extent: float) -> int:
        # Clamp before flooring: offsets may be infinite
        position = (value - origin) / extent * self.grid_size
        position = min(float(self.grid_size - 1), max(0.0, position))
        return int(math.floor(position))

    def cell_of(self, point: Point) -> Tuple[int, int]:
        """(column, row) of the cell that holds ``point``, clamped to the grid."""
        x, y = point
        return (
            self._cell_coord(x, self.bounds.min_x, self.bounds.width),
            self._cell_coord(y, self.bounds.min_y, self.bounds.height),
        )

    def insert(self, element: T, point: Point) -> None:
        """Append ``element`` located at ``point``."""
        x, y = float(point[0]), float(point[1])
        require(
            math.isfinite(x) and math.isfinite(y),
            f"Spatial contract violated: non-finite point {point!r}"
        )
        index = len(self._elements)
        self._elements.append(element)
        self._points.append((x, y))

        col, row = self.cell_of((x, y))
        self._cells[row * self.grid_size + col].append(index)
        self._coords = None

    def insert_all(self, elements: Iterable[T], value_accessor: Callable[[T], Point]) -> None:
        """Insert every element at ``value_accessor(element)``."""
        for element in elements:
            self.insert(element, value_accessor(element))

    def query(self, center: Point, radius: float) -> List[T]:
        """Elements whose Euclidean distance to ``center`` is <= ``radius``.

        Results follow cell order (row-major), then insertion order.

        Raises
        ------
        ContractViolation
            If radius is negative or the center is not finite
        """
        require(radius >= 0, f"Spatial contract violated: radius must be >= 0, got {radius}")
        require(
            math.isfinite(center[0]) and math.isfinite(center[1]),
            f"Spatial contract violated: non-finite query center {center!r}"
        )
        if not self._elements:
            return []

        cx, cy = float(center[0]), float(center[1])
        min_col, min_row = self.cell_of((cx - radius, cy - radius))
        max_col, max_row = self.cell_of((cx + radius, cy + radius))

        candidates = []
        for row in range(min_row, max_row + 1):
            offset = row * self.grid_size
            for col in range(min_col, max_col + 1):
                candidates.extend(self._cells[offset + col])

        if not candidates:
            return []

        if self._coords is None:
            self._coords = np.asarray(self._points, dtype=np.float64)

        idx = np.asarray(candidates, dtype=np.int64)
        dx = self._coords[idx, 0] - cx
        dy = self._coords[idx, 1] - cy
        hits = idx[dx * dx + dy * dy <= radius * radius]
        return [self._elements[i] for i in hits.tolist()]

    def cell_counts(self) -> np.ndarray:
        """Occupancy per cell as a (grid_size, grid_size) array, rows first."""
        counts = np.fromiter((len(cell) for cell in self._cells), dtype=np.int64,
                             count=len(self._cells))
        return counts.reshape(self.grid_size, self.grid_size)


def build_grid(elements: Iterable[T], value_accessor: Callable[[T], Point],
               bounds: Bounds, grid_size: int = 100) -> SpatialGrid[T]:
    """Build a fully populated grid in one call."""
    grid = SpatialGrid(bounds, grid_size)
    grid.insert_all(elements, value_accessor)
    logger.debug("Spatial grid built: %d points, %dx%d cells", len(grid), grid_size, grid_size)
    return grid
