"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., WINDOW_SIZE -> window_size, FPS -> fps).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Any, Literal, Optional

from pydantic import Field, field_validator, model_validator

from lodview.schemas.base import LodBaseModel
from lodview.schemas.options import (
    SamplingStrategy,
    normalize_frequency_input,
    normalize_strategy_input,
    parse_strategy,
)


class UserSamplingConfig(LodBaseModel):
    """User-facing sampling config."""
    strategy: Optional[SamplingStrategy] = None
    lod_levels: Optional[list[int]] = None
    eager_threshold: Optional[int] = None
    default_target_points: Optional[int] = None

    @field_validator("strategy", mode="before")
    @classmethod
    def normalize_strategy(cls, v):
        if v is None:
            return v
        return normalize_strategy_input(v)


class UserStreamConfig(LodBaseModel):
    """User-facing stream config."""
    window_size: Optional[int] = None
    update_frequency: Optional[float] = None
    rate_window_seconds: Optional[float] = None

    @field_validator("update_frequency", mode="before")
    @classmethod
    def normalize_update_frequency(cls, v):
        if v is None:
            return v
        return normalize_frequency_input(v)


class UserConfig(LodBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    A bare strategy name combines with ``buckets`` / ``threshold``:

        UserConfig(strategy="lttb", buckets=500)
        UserConfig(STRATEGY="adaptive", THRESHOLD=0.25)

    Usage
    -----
        user_cfg = UserConfig(window_size=500, fps=60, strategy="minmax")
        internal = resolve_config(param_cfg, user_cfg)
    """

    # Sampling (flat aliases)
    strategy: Optional[Any] = Field(None, alias="STRATEGY")
    buckets: Optional[int] = Field(None, ge=2, alias="BUCKETS")
    threshold: Optional[float] = Field(None, ge=0, alias="THRESHOLD")
    lod_levels: Optional[list[int]] = Field(None, alias="LOD_LEVELS")
    eager_threshold: Optional[int] = Field(None, alias="EAGER_THRESHOLD")
    target_points: Optional[int] = Field(None, alias="TARGET_POINTS")

    # Spatial index
    grid_size: Optional[int] = Field(None, alias="GRID_SIZE")

    # Streaming (flat aliases)
    window_size: Optional[int] = Field(None, alias="WINDOW_SIZE")
    fps: Optional[float] = Field(None, alias="FPS")

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    sampling: Optional[UserSamplingConfig] = None
    stream: Optional[UserStreamConfig] = None

    model_config = LodBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("fps", mode="before")
    @classmethod
    def normalize_fps(cls, v):
        """Accept 'fps60', '60hz' and UpdateFrequency members."""
        if v is None:
            return v
        return normalize_frequency_input(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    @model_validator(mode="after")
    def build_strategy(self):
        """Fold ``buckets`` / ``threshold`` into a bare strategy name.

        This is a schema responsibility: runtime code only ever sees a
        complete strategy model.
        """
        if self.strategy is None:
            if self.buckets is not None and self.threshold is not None:
                raise ValueError(
                    "buckets and threshold belong to different strategies; set strategy explicitly"
                )
            if self.buckets is not None:
                object.__setattr__(self, "strategy", "lttb")
            elif self.threshold is not None:
                object.__setattr__(self, "strategy", "adaptive")
            else:
                return self
        raw = normalize_strategy_input(self.strategy)
        if isinstance(raw, dict):
            raw = dict(raw)
            if raw["kind"] == "lttb" and self.buckets is not None:
                raw.setdefault("buckets", self.buckets)
            if raw["kind"] == "adaptive" and self.threshold is not None:
                raw.setdefault("threshold", self.threshold)
        object.__setattr__(self, "strategy", parse_strategy(raw))
        return self

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Strategy overrides are emitted as models (not dicts) so that
        ``deep_merge`` replaces the default strategy instead of merging
        fields of two different variants.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Sampling section
        sampling = {}
        if self.strategy is not None:
            sampling["strategy"] = self.strategy
        if self.lod_levels is not None:
            sampling["lod_levels"] = list(self.lod_levels)
        if self.eager_threshold is not None:
            sampling["eager_threshold"] = self.eager_threshold
        if self.target_points is not None:
            sampling["default_target_points"] = self.target_points

        # Merge with explicit sampling config
        if self.sampling is not None:
            for key in ("strategy", "lod_levels", "eager_threshold", "default_target_points"):
                value = getattr(self.sampling, key)
                if value is not None:
                    sampling[key] = value

        if sampling:
            overrides["sampling"] = sampling

        if self.grid_size is not None:
            overrides["spatial"] = {"grid_size": self.grid_size}

        # Stream section
        stream = {}
        if self.window_size is not None:
            stream["window_size"] = self.window_size
        if self.fps is not None:
            stream["update_frequency"] = self.fps

        if self.stream is not None:
            stream.update(self.stream.model_dump(exclude_none=True))

        if stream:
            overrides["stream"] = stream

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
