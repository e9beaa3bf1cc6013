"""LOD cache and reduction engine."""

from lodview.engine.metrics import RenderMetrics
from lodview.engine.lod_cache import LODCache
from lodview.engine.precompute import LODPrecomputer, PrecomputedLevel
from lodview.engine.reduction_engine import ReductionEngine

__all__ = ['RenderMetrics', 'LODCache', 'LODPrecomputer', 'PrecomputedLevel', 'ReductionEngine']
