"""Bounded sliding window fed by concurrent producers.

Producers call ``push`` from any thread at any rate. The buffer batches
arrivals and commits them to the published window on a fixed cadence
(``update_frequency`` flushes per second), so consumers see at most one
change per tick regardless of the ingest rate.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Any, Callable, Iterable, List, NamedTuple, Optional, Tuple

from lodview.contracts import assert_window_bounded
from lodview.schemas import InternalConfig
from lodview.streaming.points import TimeSeriesPoint
from lodview.streaming.rate_tracker import RateTracker
from lodview.streaming.timer import IntervalTimer

__all__ = ['StreamSnapshot', 'StreamingBuffer']

logger = logging.getLogger(__name__)


class StreamSnapshot(NamedTuple):
    """Consistent view of the buffer at one publish."""
    data: Tuple[Any, ...]
    data_rate: float
    is_active: bool
    pending_count: int


class StreamingBuffer:
    """Ingest buffer plus published window of the last ``window_size`` values.

    **Locks:**

    ``_ingest_lock`` guards the pending list and the rate tracker. It is held
    only for an append or a swap, so producers never wait on a flush.
    ``_publish_lock`` serializes the operations that replace the window
    (``flush``, ``clear``, ``set_data``). Producers never take it. When both
    are needed the publish lock is taken first.

    **Publishing:**

    The window is an immutable tuple replaced wholesale on each commit, so a
    reader holding ``buffer.data`` keeps a consistent view. Subscribers
    receive a ``StreamSnapshot`` after every commit, on the thread that
    performed it (the timer thread while active).

    Example usage::

        buffer = StreamingBuffer(config)
        buffer.subscribe(lambda snap: render(snap.data))
        buffer.start()
        buffer.push(42.0)        # any thread
        ...
        buffer.stop()
    """

    def __init__(self, config: InternalConfig,
                 clock: Callable[[], float] = time.monotonic,
                 timer_factory: Callable[..., IntervalTimer] = IntervalTimer):
        """Initialize an empty, stopped buffer.

        Parameters
        ----------
        config : InternalConfig
            Uses ``config.stream`` (window_size, update_frequency,
            rate_window_seconds).
        clock : callable, optional
            Seconds clock used to timestamp arrivals for ``data_rate``.
        timer_factory : callable, optional
            Called as ``timer_factory(interval, callback, name=...)`` by
            ``start``; must return an unstarted thread with ``stop()``.
        """
        self.config = config
        self.window_size = config.stream.window_size
        self.update_frequency = config.stream.update_frequency
        self.flush_interval = config.stream.flush_interval

        self._clock = clock
        self._timer_factory = timer_factory

        self._ingest_lock = threading.Lock()
        self._publish_lock = threading.Lock()
        self._state_lock = threading.Lock()

        self._pending: List[Any] = []
        self._rate = RateTracker(config.stream.rate_window_seconds)

        self._window: Tuple[Any, ...] = ()
        self._data_rate = 0.0

        self._active = False
        self._timer: Optional[IntervalTimer] = None
        self._subscribers: List[Callable[[StreamSnapshot], None]] = []

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------
    @property
    def data(self) -> Tuple[Any, ...]:
        """The published window, oldest first."""
        return self._window

    @property
    def data_rate(self) -> float:
        """Arrivals per second over the trailing window, as of the last flush."""
        return self._data_rate

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def pending_count(self) -> int:
        with self._ingest_lock:
            return len(self._pending)

    def snapshot(self) -> StreamSnapshot:
        return StreamSnapshot(self._window, self._data_rate, self._active,
                              self.pending_count)

    # ------------------------------------------------------------------
    # Ingest (any thread)
    # ------------------------------------------------------------------
    def push(self, value: Any) -> None:
        """Queue one value for the next flush. Never blocks on the cadence."""
        now = self._clock()
        with self._ingest_lock:
            self._pending.append(value)
            self._rate.record(now)

    def push_many(self, values: Iterable[Any]) -> None:
        """Queue several values as one arrival batch."""
        values = list(values)
        if not values:
            return
        now = self._clock()
        with self._ingest_lock:
            self._pending.extend(values)
            self._rate.record(now, len(values))

    def push_point(self, value: Any,
                   timestamp: Optional[datetime] = None) -> TimeSeriesPoint:
        """Wrap ``value`` in a ``TimeSeriesPoint`` and queue it."""
        if timestamp is None:
            point = TimeSeriesPoint(value=value)
        else:
            point = TimeSeriesPoint(value=value, timestamp=timestamp)
        self.push(point)
        return point

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------
    def flush(self) -> bool:
        """Commit pending values to the window.

        Returns
        -------
        bool
            False if nothing was pending (window and rate untouched).
        """
        with self._publish_lock:
            with self._ingest_lock:
                if not self._pending:
                    return False
                batch = self._pending
                self._pending = []
                rate = self._rate.rate(self._clock())

            window = self._window + tuple(batch)
            if len(window) > self.window_size:
                window = window[-self.window_size:]
            assert_window_bounded(window, self.window_size)

            self._window = window
            self._data_rate = rate
            snapshot = StreamSnapshot(window, rate, self._active, 0)

        logger.debug("Flushed %d values (window=%d, rate=%.1f/s)",
                     len(batch), len(window), rate)
        self._notify(snapshot)
        return True

    def clear(self) -> None:
        """Discard pending and windowed values and reset the rate to 0."""
        with self._publish_lock:
            with self._ingest_lock:
                self._pending = []
                self._rate.clear()
            self._window = ()
            self._data_rate = 0.0
            snapshot = StreamSnapshot((), 0.0, self._active, 0)
        logger.debug("Stream buffer cleared")
        self._notify(snapshot)

    def set_data(self, values: Iterable[Any]) -> None:
        """Replace the window with the last ``window_size`` of ``values``.

        Pending values are discarded. Takes effect immediately, without
        waiting for the next flush.
        """
        window = tuple(values)[-self.window_size:]
        with self._publish_lock:
            with self._ingest_lock:
                self._pending = []
            assert_window_bounded(window, self.window_size)
            self._window = window
            snapshot = StreamSnapshot(window, self._data_rate, self._active, 0)
        logger.debug("Stream window replaced: %d values", len(window))
        self._notify(snapshot)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Begin flushing every ``1 / update_frequency`` seconds. Idempotent."""
        with self._state_lock:
            if self._active:
                return
            self._active = True
            self._timer = self._timer_factory(self.flush_interval, self._tick,
                                              name="StreamFlush")
            self._timer.start()
        logger.info("Streaming started: window_size=%d, %.1f Hz",
                    self.window_size, self.update_frequency)

    def stop(self) -> None:
        """Stop the flush cycle. Idempotent.

        Once this returns the timer starts no further flush. Pending values
        stay queued until the next ``flush``, ``start`` or ``clear``.
        """
        with self._state_lock:
            if not self._active:
                return
            self._active = False
            timer, self._timer = self._timer, None

        if timer is not None:
            timer.stop()
            if timer is not threading.current_thread() and timer.is_alive():
                timer.join(timeout=self.flush_interval + 1.0)
        logger.info("Streaming stopped")

    def _tick(self) -> None:
        if self._active:
            self.flush()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------
    def subscribe(self, callback: Callable[[StreamSnapshot], None]) -> None:
        """Call ``callback(snapshot)`` after every commit."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[StreamSnapshot], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, snapshot: StreamSnapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error("Stream subscriber %r failed: %s", callback, e, exc_info=True)
