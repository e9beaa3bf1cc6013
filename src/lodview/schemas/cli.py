"""CLIConfig: Command-line operational overrides.

Minimal configuration for the benchmark command: which series sizes to
measure, how many iterations, which strategy, and verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from lodview.schemas.base import LodBaseModel
from lodview.schemas.options import parse_strategy


class CLIConfig(LodBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(counts=[1000, 1000000], strategy="minmax")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    counts: Optional[list[int]] = None
    iterations: Optional[int] = Field(None, ge=1)
    target_points: Optional[int] = Field(None, ge=2)
    strategy: Optional[Any] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("strategy", mode="before")
    @classmethod
    def validate_strategy(cls, v):
        if v is None:
            return v
        return parse_strategy(v)

    @field_validator("counts", mode="before")
    @classmethod
    def split_counts(cls, v):
        """Accept '1000,10000' as well as a list."""
        if isinstance(v, str):
            return [int(part) for part in v.split(",") if part.strip()]
        return v

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        benchmark = {}
        if self.counts is not None:
            benchmark["counts"] = list(self.counts)
        if self.iterations is not None:
            benchmark["iterations"] = self.iterations
        if self.target_points is not None:
            benchmark["target_points"] = self.target_points
        if benchmark:
            overrides["benchmark"] = benchmark

        if self.strategy is not None:
            overrides["sampling"] = {"strategy": self.strategy}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
