"""Streaming buffer: concurrent ingest, fixed-cadence publish."""

from lodview.streaming.buffer import StreamingBuffer, StreamSnapshot
from lodview.streaming.points import TimeSeriesPoint
from lodview.streaming.rate_tracker import RateTracker
from lodview.streaming.simulator import SimulatedDataGenerator
from lodview.streaming.timer import IntervalTimer

__all__ = [
    'IntervalTimer',
    'RateTracker',
    'SimulatedDataGenerator',
    'StreamSnapshot',
    'StreamingBuffer',
    'TimeSeriesPoint',
]
