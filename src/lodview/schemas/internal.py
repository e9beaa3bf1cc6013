"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from lodview.schemas.base import LodBaseModel
from lodview.schemas.options import (
    SamplingStrategy,
    normalize_frequency_input,
    normalize_strategy_input,
)
from lodview.schemas.param import validate_lod_levels


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalSamplingConfig(LodBaseModel):
    """Runtime reduction engine configuration."""
    strategy: SamplingStrategy
    lod_levels: tuple[int, ...]
    eager_threshold: int = Field(ge=0)
    default_target_points: int = Field(ge=2)

    @field_validator("strategy", mode="before")
    @classmethod
    def normalize_strategy(cls, v):
        return normalize_strategy_input(v)

    @field_validator("lod_levels", mode="before")
    @classmethod
    def normalize_lod_levels(cls, v):
        return validate_lod_levels(v)


class InternalSpatialConfig(LodBaseModel):
    """Runtime spatial index configuration."""
    grid_size: int = Field(ge=1)


class InternalStreamConfig(LodBaseModel):
    """Runtime streaming buffer configuration."""
    window_size: int = Field(ge=1)
    update_frequency: float = Field(gt=0)
    rate_window_seconds: float = Field(gt=0)

    @field_validator("update_frequency", mode="before")
    @classmethod
    def normalize_update_frequency(cls, v):
        return normalize_frequency_input(v)

    @property
    def flush_interval(self) -> float:
        """Seconds between flushes."""
        return 1.0 / self.update_frequency


class InternalBenchmarkConfig(LodBaseModel):
    """Runtime benchmark configuration."""
    counts: tuple[int, ...]
    iterations: int = Field(ge=1)
    target_points: int = Field(ge=2)


class InternalLoggingConfig(LodBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(LodBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that runtime code sees.
    It is fully validated and contains explicit values for all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.window_size = config.stream.window_size  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    sampling: InternalSamplingConfig
    spatial: InternalSpatialConfig
    stream: InternalStreamConfig
    benchmark: InternalBenchmarkConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
