"""Tests for the debounce filter and edge events."""

from __future__ import annotations

import pytest

from gpio_button import ConfigurationError, DebounceFilter, Edge, EdgeDirection, EdgeEvent

US = 1_000  # ns per microsecond


def _ev(t_us: int, direction: EdgeDirection = EdgeDirection.RISING) -> EdgeEvent:
    return EdgeEvent(direction, t_us * US)


class TestDebounceFilter:

    def test_first_event_accepted(self):
        f = DebounceFilter(5000)
        assert f.accept(_ev(123))
        assert f.last_accepted_ns == 123 * US

    def test_window_boundary(self):
        f = DebounceFilter(5000)
        assert f.accept(_ev(1000))
        assert not f.accept(_ev(1000 + 5000 - 1))
        assert f.accept(_ev(1000 + 5000))

    def test_rejected_events_do_not_move_watermark(self):
        f = DebounceFilter(5000)
        f.accept(_ev(0))
        for t in (1000, 2000, 3000, 4000, 4999):
            assert not f.accept(_ev(t))
        assert f.last_accepted_ns == 0
        assert f.accept(_ev(5000))

    def test_directions_share_one_watermark(self):
        f = DebounceFilter(5000)
        assert f.accept(_ev(0, EdgeDirection.FALLING))
        assert not f.accept(_ev(2000, EdgeDirection.RISING))
        assert not f.accept(_ev(3000, EdgeDirection.FALLING))

    def test_bounce_scenario(self):
        f = DebounceFilter(5000)
        events = [
            _ev(0, EdgeDirection.FALLING),
            _ev(2000, EdgeDirection.RISING),
            _ev(8000, EdgeDirection.RISING),
        ]
        accepted = [e for e in events if f.accept(e)]
        assert [e.timestamp_ns for e in accepted] == [0, 8000 * US]

    def test_zero_window_accepts_everything(self):
        f = DebounceFilter(0)
        assert all(f.accept(_ev(t)) for t in (0, 0, 1, 1, 2))

    def test_reset(self):
        f = DebounceFilter(5000)
        f.accept(_ev(0))
        f.reset()
        assert f.accept(_ev(1))

    @pytest.mark.parametrize("bad", [-1, 1.5, None, True])
    def test_invalid_window(self, bad):
        with pytest.raises(ConfigurationError):
            DebounceFilter(bad)


class TestEdgeEvent:

    def test_seconds_split(self):
        ev = EdgeEvent.from_parts(EdgeDirection.FALLING, 12, 345)
        assert ev.timestamp_ns == 12_000_000_345
        assert (ev.seconds, ev.nanoseconds) == (12, 345)
        assert not ev.is_rising

    def test_matches_selector(self):
        rising = EdgeEvent(EdgeDirection.RISING, 0)
        assert rising.matches(Edge.RISING)
        assert rising.matches(Edge.BOTH)
        assert not rising.matches(Edge.FALLING)

    def test_str(self):
        assert str(EdgeEvent.from_parts(EdgeDirection.RISING, 1, 5)) == "rising@1.000000005"
