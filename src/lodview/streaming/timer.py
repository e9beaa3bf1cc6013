"""Fixed-cadence callback thread.

Drives the streaming buffer's flush cycle and the simulated data source.
Pacing uses ``Event.wait`` against an absolute schedule, so a slow callback
delays the next tick instead of shifting every later tick. Ticks missed
while a callback overran are dropped, not replayed.
"""

import logging
import threading
import time
from typing import Callable

__all__ = ['IntervalTimer']

logger = logging.getLogger(__name__)


class IntervalTimer(threading.Thread):
    """Calls ``callback()`` every ``interval`` seconds until stopped.

    Example usage::

        timer = IntervalTimer(1 / 30, buffer.flush, name="StreamFlush")
        timer.start()
        ...
        timer.stop()
        timer.join()
    """

    def __init__(self, interval: float, callback: Callable[[], object],
                 name: str = "IntervalTimer"):
        super().__init__(daemon=True, name=name)
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self.ticks = 0
        self._stop_event = threading.Event()

    def stop(self):
        """Request shutdown. Idempotent; a callback already running completes."""
        self._stop_event.set()

    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self):
        logger.debug("%s started: interval=%.4fs", self.name, self.interval)
        next_tick = time.monotonic() + self.interval

        while not self._stop_event.wait(max(0.0, next_tick - time.monotonic())):
            try:
                self.callback()
            except Exception as e:
                logger.error("%s callback failed: %s", self.name, e, exc_info=True)
            self.ticks += 1

            next_tick += self.interval
            now = time.monotonic()
            if next_tick < now:
                next_tick = now + self.interval

        logger.debug("%s stopped after %d ticks", self.name, self.ticks)
