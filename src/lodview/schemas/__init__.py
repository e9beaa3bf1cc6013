"""Pydantic configuration schemas for lodview.

All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line overrides for the benchmark tool
"""

from lodview.schemas.options import (
    AdaptiveSampling,
    LTTBSampling,
    MinMaxSampling,
    NoSampling,
    SamplingStrategy,
    UniformSampling,
    UpdateFrequency,
    parse_strategy,
    strategy_label,
)
from lodview.schemas.resolve import resolve_config
from lodview.schemas.internal import InternalConfig
from lodview.schemas.param import ParamConfig
from lodview.schemas.user import UserConfig
from lodview.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'SamplingStrategy',
    'NoSampling',
    'UniformSampling',
    'LTTBSampling',
    'MinMaxSampling',
    'AdaptiveSampling',
    'UpdateFrequency',
    'parse_strategy',
    'strategy_label',
]
