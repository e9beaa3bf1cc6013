"""Sampling strategy variants and stream update frequencies.

A sampling strategy is pure data: a tagged variant discriminated by ``kind``.
The reduction engine interprets it; the models carry no behavior.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import ConfigDict, Field, TypeAdapter

from lodview.schemas.base import LodBaseModel


class _StrategyModel(LodBaseModel):
    """Frozen base for strategy variants (hashable, safe to share)."""

    model_config = ConfigDict(frozen=True)


class NoSampling(_StrategyModel):
    """Identity: keep every point."""
    kind: Literal["none"] = "none"


class UniformSampling(_StrategyModel):
    """Regular stride over the index range."""
    kind: Literal["uniform"] = "uniform"


class LTTBSampling(_StrategyModel):
    """Largest-Triangle-Three-Buckets (bucket midpoint selection)."""
    kind: Literal["lttb"] = "lttb"
    buckets: int = Field(1000, ge=2, description="Maximum number of output buckets")


class MinMaxSampling(_StrategyModel):
    """Bucketed sampling meant to keep peaks and valleys."""
    kind: Literal["minmax"] = "minmax"


class AdaptiveSampling(_StrategyModel):
    """Variance-driven density. Currently falls back to uniform sampling."""
    kind: Literal["adaptive"] = "adaptive"
    threshold: float = Field(0.1, ge=0)


SamplingStrategy = Annotated[
    Union[NoSampling, UniformSampling, LTTBSampling, MinMaxSampling, AdaptiveSampling],
    Field(discriminator="kind"),
]

_STRATEGY_ADAPTER = TypeAdapter(SamplingStrategy)

# Accepted spellings -> canonical kind
_KIND_ALIASES = {
    "none": "none",
    "off": "none",
    "identity": "none",
    "uniform": "uniform",
    "lttb": "lttb",
    "largest_triangle": "lttb",
    "largest_triangle_three_buckets": "lttb",
    "minmax": "minmax",
    "min_max": "minmax",
    "adaptive": "adaptive",
}


def _canonical_kind(name: str) -> str:
    key = name.lower().strip().replace("-", "_").replace(" ", "_")
    if key not in _KIND_ALIASES:
        raise ValueError(
            f"Unknown sampling strategy '{name}'. "
            f"Expected one of: {sorted(set(_KIND_ALIASES.values()))}"
        )
    return _KIND_ALIASES[key]


def normalize_strategy_input(value: Any) -> Any:
    """Turn forgiving strategy input into something pydantic can validate.

    Accepts strategy models, names (``"LTTB"``, ``"min-max"``) and dicts whose
    ``kind`` may use any accepted spelling.
    """
    if isinstance(value, _StrategyModel):
        return value
    if isinstance(value, str):
        return {"kind": _canonical_kind(value)}
    if isinstance(value, dict) and isinstance(value.get("kind"), str):
        normalized = dict(value)
        normalized["kind"] = _canonical_kind(value["kind"])
        return normalized
    return value


def parse_strategy(value: Any) -> SamplingStrategy:
    """Validate any accepted strategy spelling into a strategy model.

    Examples
    --------
    >>> parse_strategy("lttb")
    LTTBSampling(kind='lttb', buckets=1000)
    >>> parse_strategy({"kind": "adaptive", "threshold": 0.5}).threshold
    0.5
    """
    return _STRATEGY_ADAPTER.validate_python(normalize_strategy_input(value))


def strategy_label(strategy: SamplingStrategy) -> str:
    """Short human readable label used in log messages and benchmark tables."""
    if isinstance(strategy, LTTBSampling):
        return f"lttb(buckets={strategy.buckets})"
    if isinstance(strategy, AdaptiveSampling):
        return f"adaptive(threshold={strategy.threshold:g})"
    return strategy.kind


class UpdateFrequency(float, Enum):
    """Standard flush cadences for streaming buffers (flushes per second).

    Any positive float is also accepted wherever a frequency is configured.
    """
    FPS15 = 15.0
    FPS30 = 30.0
    FPS60 = 60.0
    FPS120 = 120.0

    @property
    def fps(self) -> float:
        return float(self.value)


def normalize_frequency_input(value: Any) -> Any:
    """Accept ``UpdateFrequency``, numbers, ``"fps60"``, ``"60hz"`` or ``"60"``."""
    if isinstance(value, UpdateFrequency):
        return value.fps
    if isinstance(value, str):
        text = value.lower().strip()
        if text.startswith("fps"):
            text = text[3:]
        elif text.endswith("hz"):
            text = text[:-2]
        elif text.endswith("fps"):
            text = text[:-3]
        try:
            return float(text.strip())
        except ValueError:
            raise ValueError(f"Invalid update frequency: '{value}'") from None
    return value
