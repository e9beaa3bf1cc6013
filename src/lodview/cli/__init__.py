"""Command-line entry points."""

from lodview.cli.run_benchmark import configure_logging, main

__all__ = ['configure_logging', 'main']
