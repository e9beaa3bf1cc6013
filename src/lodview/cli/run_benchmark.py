"""Benchmark command.

Resolves configuration (Param < User < CLI), times the reduction engine on
synthetic series and prints one row per (count, strategy).

Usage:
    lodview-bench
    lodview-bench --counts 1000,100000 --strategy lttb --strategy minmax
    lodview-bench --config my_config.py -v
"""

import argparse
import importlib.util
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from lodview.benchmark import run_benchmark_suite
from lodview.schemas import CLIConfig, ParamConfig, UserConfig, resolve_config

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Route root logging to the console (and optionally ``log_file``)."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)


def load_user_config_dict(config_path: str) -> dict:
    """Load the ``CONFIG`` dict from a Python file.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Benchmark lodview reduction strategies")
    parser.add_argument("--config", help="Path to user config file (Python, CONFIG dict)")
    parser.add_argument("--counts", help="Comma-separated series sizes, e.g. 1000,100000")
    parser.add_argument("--strategy", action="append",
                        help="Sampling strategy (repeatable): none, uniform, lttb, minmax, adaptive")
    parser.add_argument("--iterations", type=int, help="Timed queries per run")
    parser.add_argument("--target-points", type=int, help="Requested points per query")
    parser.add_argument("--seed", type=int, default=0, help="Random seed for test data")
    parser.add_argument("--output", help="Also write the table to this CSV file")
    parser.add_argument("--log-file", help="Also log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    param_cfg = ParamConfig()
    user_cfg = UserConfig.model_validate(load_user_config_dict(args.config)) if args.config else None

    strategies = args.strategy or []
    cli_cfg = CLIConfig.model_validate({
        k: v
        for k, v in {
            "counts": args.counts,
            "iterations": args.iterations,
            "target_points": args.target_points,
            "strategy": strategies[0] if strategies else None,
            "log_level": "DEBUG" if args.verbose else None,
        }.items()
        if v is not None
    })

    config = resolve_config(param_cfg, user_cfg, cli_cfg)
    configure_logging(config.logging.level, args.log_file)

    if args.verbose:
        logger.debug("Resolved configuration:\n%s", json.dumps(config.model_dump(), indent=2))

    table = run_benchmark_suite(config, strategies=strategies or None, seed=args.seed)

    with pd.option_context("display.width", 120, "display.max_columns", None):
        print(table.to_string(index=False, float_format=lambda v: f"{v:.3f}"))

    if args.output:
        table.to_csv(args.output, index=False)
        logger.info("Wrote %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
