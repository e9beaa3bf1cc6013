"""`lodview` - level-of-detail data reduction for interactive charts.

Subpackages:
- sampling: Series reducers (uniform, LTTB, min/max)
- engine: LOD cache, reduction engine, render metrics
- spatial: Grid index for radius queries
- streaming: Bounded sliding window with fixed-cadence publishing
- schemas: Pydantic configuration (Param < User < CLI)
- contracts: Fail-fast invariant checks
"""

__version__ = "0.1.0"
