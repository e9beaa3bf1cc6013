"""Tests for the grid spatial index and its background builder."""

import math
import queue

import numpy as np
import pytest

from lodview.contracts import ContractViolation
from lodview.spatial import Bounds, IndexBuildResult, SpatialGrid, SpatialIndexBuilder, build_grid

pytestmark = [pytest.mark.unit, pytest.mark.spatial]


@pytest.fixture
def grid():
    return SpatialGrid(Bounds(0, 0, 100, 100), grid_size=100)


class TestQuery:

    def test_finds_only_nearby_point(self, grid):
        """Two far-apart points; radius 5 around the first finds only it."""
        grid.insert("a", (10, 10))
        grid.insert("b", (90, 90))

        assert grid.query((10, 10), radius=5) == ["a"]

    def test_radius_boundary_is_inclusive(self, grid):
        grid.insert("edge", (13, 14))
        assert grid.query((10, 10), radius=5) == ["edge"]

    def test_corner_of_query_square_excluded(self, grid):
        """Inside the scanned cells but outside the circle."""
        grid.insert("corner", (14, 14))
        assert grid.query((10, 10), radius=5) == []

    def test_zero_radius(self, grid):
        grid.insert("here", (50, 50))
        grid.insert("near", (50.5, 50))
        assert grid.query((50, 50), radius=0) == ["here"]

    def test_negative_radius_violates_contract(self, grid):
        with pytest.raises(ContractViolation, match="radius must be >= 0"):
            grid.query((0, 0), radius=-1)

    def test_infinite_radius_returns_everything(self, grid):
        grid.insert("a", (10, 10))
        grid.insert("b", (90, 90))

        assert sorted(grid.query((10, 10), radius=float("inf"))) == ["a", "b"]

    def test_huge_query_offsets_clamp_to_edges(self, grid):
        grid.insert("corner", (99, 99))
        assert grid.query((0.0, 0.0), radius=1e300) == ["corner"]

    @pytest.mark.parametrize("center", [(float("nan"), 0.0), (0.0, float("inf"))])
    def test_non_finite_center_rejected(self, grid, center):
        with pytest.raises(ContractViolation, match="non-finite query center"):
            grid.query(center, radius=1)

    def test_empty_grid(self, grid):
        assert grid.query((50, 50), radius=1000) == []

    def test_matches_brute_force(self):
        rng = np.random.default_rng(7)
        points = [tuple(p) for p in rng.uniform(0, 100, size=(500, 2)).tolist()]
        grid = build_grid(range(len(points)), lambda i: points[i], Bounds(0, 0, 100, 100), grid_size=17)

        center, radius = (40.0, 60.0), 12.5
        expected = {i for i, (x, y) in enumerate(points)
                    if math.hypot(x - center[0], y - center[1]) <= radius}

        assert set(grid.query(center, radius)) == expected


class TestGeometry:

    def test_cell_of(self, grid):
        assert grid.cell_of((0, 0)) == (0, 0)
        assert grid.cell_of((10.5, 99.9)) == (10, 99)

    def test_extreme_coordinates_clamped(self, grid):
        assert grid.cell_of((-1e308, 1e308)) == (0, 99)

    def test_outside_points_clamped_into_edge_cells(self, grid):
        assert grid.cell_of((-20, 150)) == (0, 99)

        grid.insert("outside", (105, 50))
        assert grid.query((100, 50), radius=5) == ["outside"]

    def test_cell_counts(self):
        grid = SpatialGrid(Bounds(0, 0, 10, 10), grid_size=2)
        grid.insert_all([(1, 1), (2, 2), (9, 1)], lambda p: p)

        counts = grid.cell_counts()
        assert counts.shape == (2, 2)
        assert counts[0, 0] == 2
        assert counts[0, 1] == 1
        assert counts.sum() == len(grid) == 3

    def test_non_finite_point_rejected(self, grid):
        with pytest.raises(ContractViolation, match="non-finite"):
            grid.insert("bad", (float("nan"), 1.0))

    @pytest.mark.parametrize("bounds, size", [
        (Bounds(0, 0, 0, 10), 10),
        (Bounds(0, 0, 10, -1), 10),
        (Bounds(0, 0, 10, 10), 0),
    ])
    def test_invalid_geometry(self, bounds, size):
        with pytest.raises(ContractViolation):
            SpatialGrid(bounds, size)


class TestBounds:

    def test_from_points(self):
        bounds = Bounds.from_points([(1, 5), (4, 2), (3, 3)])
        assert bounds == Bounds(1.0, 2.0, 3.0, 3.0)
        assert (bounds.max_x, bounds.max_y) == (4.0, 5.0)

    def test_degenerate_extent_widened(self):
        bounds = Bounds.from_points([(2, 7), (2, 9)])
        assert bounds.width == 1.0
        assert bounds.height == 2.0

    def test_padding(self):
        bounds = Bounds.from_points([(0, 0), (10, 10)], padding=1.0)
        assert bounds == Bounds(-1.0, -1.0, 12.0, 12.0)

    def test_no_points(self):
        with pytest.raises(ContractViolation):
            Bounds.from_points([])


class TestBuilder:

    def test_publishes_grid(self):
        results = queue.Queue()
        points = [(float(i), float(i)) for i in range(100)]
        builder = SpatialIndexBuilder(points, lambda p: p, Bounds(0, 0, 100, 100), 10,
                                      results, generation=3)
        builder.start()
        builder.join(timeout=5)

        result = results.get_nowait()
        assert isinstance(result, IndexBuildResult)
        assert result.ok
        assert result.generation == 3
        assert len(result.grid) == 100
        assert result.grid.query((50, 50), 1.5) == [(49.0, 49.0), (50.0, 50.0), (51.0, 51.0)]

    def test_publishes_error(self):
        results = queue.Queue()
        builder = SpatialIndexBuilder([(1, 1), (float("inf"), 2)], lambda p: p,
                                      Bounds(0, 0, 10, 10), 4, results)
        builder.run()

        result = results.get_nowait()
        assert not result.ok
        assert isinstance(result.error, ContractViolation)

    def test_stopped_builder_publishes_nothing(self):
        results = queue.Queue()
        builder = SpatialIndexBuilder([(1, 1)], lambda p: p, Bounds(0, 0, 10, 10), 4, results)
        builder.stop()
        builder.run()

        assert results.empty()
