"""lodview user configuration.

User-facing overrides for the benchmark command. Expert defaults live in
``lodview.schemas.param.ParamConfig``; only list what you want to change.

Usage:
    lodview-bench --config scripts/user_config.py
    lodview-bench --config scripts/user_config.py --counts 1000,1000000
"""

CONFIG = {
    # ========================================================================
    # SAMPLING
    # ========================================================================
    "STRATEGY": "lttb",       # none, uniform, lttb, minmax, adaptive
    "BUCKETS": 1000,          # LTTB buckets (>= 2)
    "TARGET_POINTS": 1000,    # Default point budget for optimized_data()
    "LOD_LEVELS": [100, 500, 1000, 5000, 10000],
    "EAGER_THRESHOLD": 10000, # Larger series get every level precomputed

    # ========================================================================
    # SPATIAL INDEX
    # ========================================================================
    "GRID_SIZE": 100,         # Cells per axis

    # ========================================================================
    # STREAMING
    # ========================================================================
    "WINDOW_SIZE": 100,       # Values kept in the published window
    "FPS": "fps30",           # fps15, fps30, fps60, fps120 or any positive number

    "LOG_LEVEL": "INFO",
}
