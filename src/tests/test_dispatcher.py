"""Tests for the interrupt regime: EventDispatcher and Button.begin_interrupt()."""

from __future__ import annotations

import threading
import time

import pytest

from gpio_button import (
    Button,
    CachedState,
    ConfigurationError,
    Edge,
    EdgeDirection,
    EventDispatcher,
    LegacyPUD,
    PolarityConfig,
    ResourceError,
    SimulatedLine,
    StateUnknownError,
)

US = 1_000


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class BlockingOpenLine(SimulatedLine):
    """SimulatedLine whose open() waits until the test lets it finish."""

    def __init__(self) -> None:
        super().__init__(initial_level=1, poll_interval_s=0.005)
        self.opening = threading.Event()
        self.proceed = threading.Event()

    def open(self, chip, line_offset, bias):
        self.opening.set()
        self.proceed.wait(2.0)
        return super().open(chip, line_offset, bias)


@pytest.fixture
def button(line):
    btn = Button(17, LegacyPUD.UP, line=line)
    yield btn
    btn.clean()


# ===========================================================================
# Starting dispatch
# ===========================================================================


class TestBeginInterrupt:

    def test_begin_interrupt_without_begin(self, line, button, sink):
        assert button.begin_interrupt(sink)
        assert button.is_open
        assert button.interrupt_active
        assert line.edges_enabled

    def test_missing_callback(self, line, button):
        assert button.begin_interrupt(None) is False
        assert isinstance(button.last_error, ConfigurationError)
        assert button.error_message == "Callback is null."
        assert not button.interrupt_active

    def test_invalid_edge_selector(self, button, sink):
        assert button.begin_interrupt(sink, edge="both") is False
        assert isinstance(button.last_error, ConfigurationError)

    def test_invalid_debounce_window(self, button, sink):
        assert button.begin_interrupt(sink, debounce_us=-5) is False
        assert isinstance(button.last_error, ConfigurationError)
        assert not button.interrupt_active

    def test_edge_configuration_failure(self, line, button, sink):
        line.edge_error = ResourceError("edge detection unsupported")
        assert button.begin_interrupt(sink) is False
        assert isinstance(button.last_error, ResourceError)
        assert not button.interrupt_active

    def test_out_of_range_offset(self, line, sink):
        btn = Button(99, line=line)
        assert btn.begin_interrupt(sink) is False
        assert isinstance(btn.last_error, ConfigurationError)
        assert line.handles == []

    def test_second_start_rejected(self, button, sink):
        assert button.begin_interrupt(sink)
        assert button.begin_interrupt(sink) is False
        assert "already active" in button.error_message
        assert button.interrupt_active


# ===========================================================================
# Delivery
# ===========================================================================


class TestDelivery:

    def test_bounce_scenario(self, line, button, sink):
        assert button.begin_interrupt(sink, Edge.BOTH, debounce_us=5000)
        line.inject_edge(EdgeDirection.FALLING, 0)
        line.inject_edge(EdgeDirection.RISING, 2000 * US)
        line.inject_edge(EdgeDirection.RISING, 8000 * US)
        assert sink.wait_for(2)
        time.sleep(0.05)
        assert sink.calls == [(False, 0, 0), (True, 0, 8_000_000)]

    def test_sink_runs_on_worker_thread(self, line, button, sink):
        button.begin_interrupt(sink)
        line.inject_edge(EdgeDirection.FALLING, 1)
        assert sink.wait_for(1)
        assert sink.threads == ["gpio-button-17"]
        assert sink.threads[0] != threading.current_thread().name

    def test_order_preserved(self, line, button, sink):
        button.begin_interrupt(sink, debounce_us=0)
        stamps = [i * 1000 for i in range(20)]
        for i, t in enumerate(stamps):
            line.inject_edge(EdgeDirection.RISING if i % 2 else EdgeDirection.FALLING, t)
        assert sink.wait_for(20)
        assert [c[2] for c in sink.calls] == stamps

    def test_rising_only_selector(self, line, button, sink):
        button.begin_interrupt(sink, Edge.RISING, debounce_us=0)
        line.inject_edge(EdgeDirection.FALLING, 1_000)
        line.inject_edge(EdgeDirection.RISING, 2_000)
        assert sink.wait_for(1)
        time.sleep(0.05)
        assert sink.calls == [(True, 0, 2_000)]

    def test_cached_state_follows_edges(self, line, button, sink):
        button.begin_interrupt(sink)
        with pytest.raises(StateUnknownError):
            button.get()
        # pull-up: falling edge means pressed
        line.inject_edge(EdgeDirection.FALLING, 5 * 1_000_000_000)
        assert sink.wait_for(1)
        assert button.get() is True
        assert button.last_updated_ns() == 5 * 1_000_000_000

    def test_sink_exception_does_not_stop_worker(self, line, button):
        calls = []

        def flaky(is_rising, sec, nsec):
            calls.append(nsec)
            if len(calls) == 1:
                raise RuntimeError("boom")

        button.begin_interrupt(flaky, debounce_us=0)
        line.inject_edge(EdgeDirection.FALLING, 1)
        line.inject_edge(EdgeDirection.RISING, 2)
        assert _wait_until(lambda: len(calls) == 2)
        assert button.interrupt_active

    def test_wait_error_surfaces_on_button(self, line, button, sink):
        button.begin_interrupt(sink)
        line.wait_error = ResourceError("line vanished")
        assert _wait_until(lambda: not button.interrupt_active)
        assert isinstance(button.last_error, ResourceError)
        assert button.error_message == "line vanished"

    def test_foreign_wait_error_surfaces_on_button(self, line, button, sink):
        class RequestReleasedError(Exception):
            pass

        button.begin_interrupt(sink)
        line.wait_error = RequestReleasedError("request released")
        assert _wait_until(lambda: not button.interrupt_active)
        assert isinstance(button.last_error, ResourceError)
        assert isinstance(button.last_error.__cause__, RequestReleasedError)
        assert "request released" in button.error_message

    def test_restart_after_worker_error(self, line, button, sink):
        button.begin_interrupt(sink)
        line.wait_error = ResourceError("line vanished")
        assert _wait_until(lambda: not button.interrupt_active)
        assert button.begin_interrupt(sink)
        line.inject_edge(EdgeDirection.RISING, 10)
        assert sink.wait_for(1)


# ===========================================================================
# Stopping
# ===========================================================================


class TestStop:

    def test_no_sink_calls_after_stop(self, line, button, sink):
        button.begin_interrupt(sink, debounce_us=0)
        line.inject_edge(EdgeDirection.FALLING, 1)
        assert sink.wait_for(1)
        button.end_interrupt()
        count = len(sink.calls)
        for t in range(2, 10):
            line.inject_edge(EdgeDirection.RISING, t)
        time.sleep(0.05)
        assert len(sink.calls) == count
        assert not line.edges_enabled

    def test_stop_is_idempotent(self, button, sink):
        button.begin_interrupt(sink)
        button.end_interrupt()
        button.end_interrupt()
        assert not button.interrupt_active
        assert button.is_open

    def test_stop_bounded_on_quiet_line(self, button, sink):
        button.begin_interrupt(sink)
        start = time.monotonic()
        button.end_interrupt()
        assert time.monotonic() - start < 1.0

    def test_clean_stops_dispatch_and_releases(self, line, button, sink):
        button.begin_interrupt(sink)
        button.clean()
        assert not button.interrupt_active
        assert line.close_count == 1

    def test_concurrent_stop(self, line, button, sink):
        button.begin_interrupt(sink)
        threads = [threading.Thread(target=button.clean) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=2.0)
        assert not any(t.is_alive() for t in threads)
        assert line.close_count == 1

    def test_clean_during_begin_interrupt(self, sink):
        line = BlockingOpenLine()
        button = Button(17, LegacyPUD.UP, line=line)
        starter = threading.Thread(target=button.begin_interrupt, args=(sink,))
        starter.start()
        assert line.opening.wait(2.0)
        cleaner = threading.Thread(target=button.clean)
        cleaner.start()
        time.sleep(0.05)
        line.proceed.set()
        starter.join(timeout=2.0)
        cleaner.join(timeout=2.0)
        assert not starter.is_alive() and not cleaner.is_alive()
        assert not button.interrupt_active
        assert not button.is_open
        assert line.close_count == 1
        assert not line.edges_enabled

    def test_sink_can_read_while_clean_waits(self, line, button):
        entered = threading.Event()
        levels = []

        def reading_sink(is_rising, sec, nsec):
            entered.set()
            time.sleep(0.05)
            levels.append(button.value())

        button.begin_interrupt(reading_sink, debounce_us=0)
        line.inject_edge(EdgeDirection.RISING, 1)
        assert entered.wait(2.0)
        cleaner = threading.Thread(target=button.clean)
        cleaner.start()
        cleaner.join(timeout=2.0)
        assert not cleaner.is_alive()
        assert levels == [1]
        assert not button.is_open

    def test_stop_from_inside_sink(self, line, button):
        seen = []

        def stopping_sink(is_rising, sec, nsec):
            seen.append(nsec)
            button.end_interrupt()

        button.begin_interrupt(stopping_sink, debounce_us=0)
        line.inject_edge(EdgeDirection.FALLING, 1)
        assert _wait_until(lambda: not button.interrupt_active)
        line.inject_edge(EdgeDirection.RISING, 2)
        time.sleep(0.05)
        assert seen == [1]


class TestEventDispatcherDirect:

    def test_stop_without_start(self, line):
        EventDispatcher(line).stop()

    def test_start_requires_callable_sink(self, line):
        handle = line.open("/dev/gpiochip0", 4, PolarityConfig().bias)
        dispatcher = EventDispatcher(line)
        with pytest.raises(ConfigurationError):
            dispatcher.start(handle, PolarityConfig(), Edge.BOTH, 0, "not callable", CachedState())
        assert not dispatcher.is_running

    def test_last_error_recorded(self, line, sink):
        handle = line.open("/dev/gpiochip0", 4, PolarityConfig().bias)
        dispatcher = EventDispatcher(line)
        errors = []
        dispatcher.start(handle, PolarityConfig(), Edge.BOTH, 0, sink, CachedState(), on_error=errors.append)
        line.wait_error = ResourceError("gone")
        assert _wait_until(lambda: not dispatcher.is_running)
        assert dispatcher.last_error is errors[0]
        dispatcher.stop()
