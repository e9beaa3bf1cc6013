"""Spatial index: grid-bucketed radius queries over 2D points."""

from lodview.spatial.grid_index import Bounds, SpatialGrid, build_grid
from lodview.spatial.builder import IndexBuildResult, SpatialIndexBuilder

__all__ = ['Bounds', 'SpatialGrid', 'build_grid', 'SpatialIndexBuilder', 'IndexBuildResult']
