"""Synthetic producer for exercising a streaming buffer."""

import logging
import threading
from typing import Optional

import numpy as np

from lodview.streaming.buffer import StreamingBuffer
from lodview.streaming.timer import IntervalTimer

__all__ = ['SimulatedDataGenerator']

logger = logging.getLogger(__name__)

MEAN = 50.0
MEAN_REVERSION = 0.05
NOISE = 2.0
LOWER, UPPER = 0.0, 100.0


class SimulatedDataGenerator:
    """Bounded random walk pushed into ``stream`` every ``interval`` seconds.

    Each step adds uniform noise in ``[-2, 2]`` plus a pull of 5% of the
    distance back toward 50, then clamps to ``[0, 100]``.
    """

    def __init__(self, stream: StreamingBuffer, interval: float = 0.05,
                 seed: Optional[int] = None, start_value: float = MEAN):
        self.stream = stream
        self.interval = interval
        self.value = float(start_value)
        self._rng = np.random.default_rng(seed)
        self._lock = threading.Lock()
        self._timer: Optional[IntervalTimer] = None

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    def step(self) -> float:
        """Advance the walk once and push the new value."""
        with self._lock:
            noise = self._rng.uniform(-NOISE, NOISE)
            pull = (MEAN - self.value) * MEAN_REVERSION
            self.value = float(np.clip(self.value + noise + pull, LOWER, UPPER))
            value = self.value
        self.stream.push(value)
        return value

    def start(self) -> None:
        """Start the stream's flush cycle and the generator thread."""
        if self._timer is not None:
            return
        self.stream.start()
        self._timer = IntervalTimer(self.interval, self.step, name="SimulatedData")
        self._timer.start()
        logger.info("Simulated data generator started (every %.3fs)", self.interval)

    def stop(self) -> None:
        """Stop the generator thread and the stream."""
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
            timer.join(timeout=self.interval + 1.0)
            logger.info("Simulated data generator stopped")
        self.stream.stop()
