"""ParamConfig: Expert defaults for lodview.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal

from pydantic import Field, field_validator

from lodview.schemas.base import LodBaseModel
from lodview.schemas.options import (
    LTTBSampling,
    SamplingStrategy,
    normalize_frequency_input,
    normalize_strategy_input,
)


DEFAULT_LOD_LEVELS = (100, 500, 1000, 5000, 10000)


# =============================================================================
# Nested Configuration Models
# =============================================================================

def validate_lod_levels(v):
    """Sort and de-duplicate LOD levels; each level must keep two anchors."""
    levels = tuple(sorted(set(int(level) for level in v)))
    if not levels:
        raise ValueError("lod_levels must contain at least one level")
    if levels[0] < 2:
        raise ValueError(f"lod_levels must all be >= 2, got {levels[0]}")
    return levels


class SamplingConfig(LodBaseModel):
    """Reduction engine configuration."""
    strategy: SamplingStrategy = Field(default_factory=lambda: LTTBSampling(buckets=1000))
    lod_levels: tuple[int, ...] = DEFAULT_LOD_LEVELS
    eager_threshold: int = Field(
        10000, ge=0,
        description="Series longer than this get every LOD level precomputed in the background",
    )
    default_target_points: int = Field(1000, ge=2)

    @field_validator("strategy", mode="before")
    @classmethod
    def normalize_strategy(cls, v):
        """Accept strategy names and loosely spelled kinds."""
        return normalize_strategy_input(v)

    @field_validator("lod_levels", mode="before")
    @classmethod
    def normalize_lod_levels(cls, v):
        return validate_lod_levels(v)


class SpatialConfig(LodBaseModel):
    """Spatial index configuration."""
    grid_size: int = Field(100, ge=1, description="Cells per axis")


class StreamConfig(LodBaseModel):
    """Streaming buffer configuration."""
    window_size: int = Field(100, ge=1, description="Maximum number of values kept")
    update_frequency: float = Field(30.0, gt=0, description="Flushes per second")
    rate_window_seconds: float = Field(1.0, gt=0)

    @field_validator("update_frequency", mode="before")
    @classmethod
    def normalize_update_frequency(cls, v):
        """Accept UpdateFrequency members and strings like 'fps60' or '60hz'."""
        return normalize_frequency_input(v)


class BenchmarkConfig(LodBaseModel):
    """Render benchmark configuration."""
    counts: tuple[int, ...] = (1000, 10000, 100000)
    iterations: int = Field(10, ge=1)
    target_points: int = Field(1000, ge=2)


class LoggingConfig(LodBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(LodBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    spatial: SpatialConfig = Field(default_factory=SpatialConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
