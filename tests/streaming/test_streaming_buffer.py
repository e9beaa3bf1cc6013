"""Tests for the streaming buffer."""

import threading
import time
import uuid
from datetime import datetime, timezone

import pytest

from lodview.streaming import StreamingBuffer, StreamSnapshot, TimeSeriesPoint

from tests.helpers.fake_clock import ManualTimer

pytestmark = [pytest.mark.unit, pytest.mark.streaming]


@pytest.fixture
def make_buffer(make_config, fake_clock):
    def _make(**overrides):
        config = make_config(**overrides)
        return StreamingBuffer(config, clock=fake_clock, timer_factory=ManualTimer)
    return _make


@pytest.fixture
def buffer(make_buffer):
    return make_buffer(window_size=5)


class TestFlush:

    def test_window_keeps_most_recent(self, buffer):
        """Window size 5, push 1..7, one flush."""
        for value in [1, 2, 3, 4, 5, 6, 7]:
            buffer.push(value)
        buffer.flush()

        assert buffer.data == (3, 4, 5, 6, 7)

    def test_values_invisible_until_flush(self, buffer):
        buffer.push(1)
        buffer.push(2)

        assert buffer.data == ()
        assert buffer.pending_count == 2

    def test_flush_appends_in_arrival_order(self, buffer):
        buffer.push_many([1, 2])
        buffer.flush()
        buffer.push_many([3, 4, 5, 6])
        buffer.flush()

        assert buffer.data == (2, 3, 4, 5, 6)
        assert buffer.pending_count == 0

    def test_empty_flush_is_noop(self, buffer, fake_clock):
        buffer.push(1)
        buffer.flush()
        rate = buffer.data_rate
        fake_clock.advance(5.0)

        assert buffer.flush() is False
        assert buffer.data == (1,)
        assert buffer.data_rate == rate

    def test_data_rate_counts_trailing_second(self, buffer, fake_clock):
        buffer.push_many(range(10))
        fake_clock.advance(0.5)
        buffer.push_many(range(5))
        buffer.flush()
        assert buffer.data_rate == 15.0

        fake_clock.advance(0.6)
        buffer.push(99)
        buffer.flush()
        assert buffer.data_rate == 6.0

    def test_push_many_empty(self, buffer):
        buffer.push_many([])
        assert buffer.pending_count == 0


class TestClearAndReplace:

    def test_clear_resets_everything(self, buffer):
        buffer.push_many([1, 2, 3])
        buffer.flush()
        buffer.push(4)
        buffer.clear()

        assert buffer.data == ()
        assert buffer.pending_count == 0
        assert buffer.data_rate == 0.0

    def test_rate_starts_over_after_clear(self, buffer):
        buffer.push_many([1, 2, 3])
        buffer.clear()
        buffer.push(4)
        buffer.flush()

        assert buffer.data_rate == 1.0

    def test_set_data_keeps_last_window(self, buffer):
        buffer.push(100)
        buffer.set_data(range(1, 11))

        assert buffer.data == (6, 7, 8, 9, 10)
        assert buffer.pending_count == 0

    def test_set_data_short(self, buffer):
        buffer.set_data([1, 2])
        assert buffer.data == (1, 2)


class TestLifecycle:

    def test_start_creates_one_timer(self, buffer):
        buffer.start()
        buffer.start()

        timers = [t for t in ManualTimer.instances if t.callback == buffer._tick]
        assert len(timers) == 1
        assert timers[0].started
        assert timers[0].interval == pytest.approx(1 / 30)
        assert buffer.is_active

    def test_timers_from_earlier_tests_not_visible(self, buffer):
        assert ManualTimer.instances == []
        buffer.start()
        assert len(ManualTimer.instances) == 1

    def test_timer_tick_flushes(self, buffer):
        buffer.start()
        timer = ManualTimer.instances[-1]
        buffer.push(1)
        timer.fire()

        assert buffer.data == (1,)

    def test_no_flush_after_stop(self, buffer):
        buffer.start()
        timer = ManualTimer.instances[-1]
        buffer.stop()
        buffer.push(1)
        timer.fire()

        assert not buffer.is_active
        assert timer.stop_calls == 1
        assert buffer.data == ()
        assert buffer.pending_count == 1

    def test_stop_is_idempotent(self, buffer):
        buffer.stop()
        buffer.start()
        buffer.stop()
        buffer.stop()

        assert ManualTimer.instances[-1].stop_calls == 1

    def test_restart(self, buffer):
        buffer.start()
        buffer.stop()
        buffer.start()

        assert buffer.is_active
        assert ManualTimer.instances[-1].stop_calls == 0

    def test_context_manager(self, buffer):
        with buffer as active:
            assert active.is_active
        assert not buffer.is_active

    def test_push_legal_when_stopped(self, buffer):
        buffer.push(1)
        buffer.flush()
        assert buffer.data == (1,)

    def test_update_frequency_from_config(self, make_buffer):
        buffer = make_buffer(fps="fps60")
        assert buffer.flush_interval == pytest.approx(1 / 60)


class TestSubscribers:

    def test_snapshot_after_flush(self, buffer):
        seen = []
        buffer.subscribe(seen.append)
        buffer.push_many([1, 2])
        buffer.flush()

        assert seen == [StreamSnapshot((1, 2), 2.0, False, 0)]

    def test_clear_notifies(self, buffer):
        seen = []
        buffer.subscribe(seen.append)
        buffer.clear()
        buffer.unsubscribe(seen.append)
        buffer.clear()

        assert len(seen) == 1
        assert seen[0].data == ()

    def test_failing_subscriber_does_not_break_flush(self, buffer):
        def broken(_):
            raise RuntimeError("boom")

        buffer.subscribe(broken)
        buffer.push(1)

        assert buffer.flush() is True
        assert buffer.data == (1,)

    def test_snapshot_method(self, buffer):
        buffer.push(1)
        assert buffer.snapshot() == StreamSnapshot((), 0.0, False, 1)


class TestPoints:

    def test_push_point_wraps_value(self, buffer):
        point = buffer.push_point(42.0)
        buffer.flush()

        assert buffer.data == (point,)
        assert point.value == 42.0
        assert point.timestamp.tzinfo is timezone.utc
        assert isinstance(point.id, uuid.UUID)

    def test_explicit_timestamp(self, buffer):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert buffer.push_point(1, timestamp=ts).timestamp == ts

    def test_points_are_unique(self):
        assert TimeSeriesPoint(1.0).id != TimeSeriesPoint(1.0).id


class TestConcurrency:

    def test_concurrent_producers_lose_nothing(self, make_buffer):
        buffer = make_buffer(window_size=10000)
        producers = 4
        per_producer = 1000

        def produce(offset):
            for i in range(per_producer):
                buffer.push(offset + i)

        threads = [threading.Thread(target=produce, args=(n * per_producer,))
                   for n in range(producers)]
        for t in threads:
            t.start()
        for _ in range(20):
            buffer.flush()
        for t in threads:
            t.join()
        buffer.flush()

        assert sorted(buffer.data) == list(range(producers * per_producer))

    def test_window_stays_bounded_under_load(self, make_buffer):
        buffer = make_buffer(window_size=50)
        sizes = []
        buffer.subscribe(lambda snap: sizes.append(len(snap.data)))

        for i in range(1000):
            buffer.push(i)
            if i % 7 == 0:
                buffer.flush()
        buffer.flush()

        assert max(sizes) <= 50
        assert buffer.data == tuple(range(950, 1000))


@pytest.mark.streaming
def test_real_timer_flushes_at_cadence(make_config):
    buffer = StreamingBuffer(make_config(window_size=10, fps=120))
    buffer.start()
    try:
        buffer.push_many(range(20))
        deadline = time.monotonic() + 2.0
        while buffer.data != tuple(range(10, 20)) and time.monotonic() < deadline:
            time.sleep(0.01)
        assert buffer.data == tuple(range(10, 20))
    finally:
        buffer.stop()

    buffer.push(99)
    time.sleep(0.05)
    assert 99 not in buffer.data
    assert buffer.pending_count == 1
