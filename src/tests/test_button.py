"""Tests for Button lifecycle and the polling regime."""

from __future__ import annotations

import threading

import pytest

from gpio_button import (
    Bias,
    Button,
    ConfigurationError,
    LegacyPUD,
    Polarity,
    PolarityConfig,
    ResourceError,
    SimulatedLine,
    StateUnknownError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_button(line: SimulatedLine, offset: int = 17, polarity=LegacyPUD.OFF) -> Button:
    return Button(offset, polarity, line=line, chip="/dev/gpiochip0")


# ===========================================================================
# Construction and begin()
# ===========================================================================


class TestBegin:

    def test_begin_opens_line_with_bias(self, line):
        button = _make_button(line, polarity=LegacyPUD.UP)
        assert button.begin()
        assert button.is_open
        assert button.error_message == ""
        handle = line.handles[0]
        assert (handle.chip, handle.line_offset, handle.bias) == ("/dev/gpiochip0", 17, Bias.PULL_UP)

    def test_begin_twice_keeps_one_handle(self, line):
        button = _make_button(line)
        assert button.begin()
        assert button.begin()
        assert len(line.handles) == 1

    @pytest.mark.parametrize("offset", [31, 64, -1])
    def test_out_of_range_offset(self, line, offset):
        button = _make_button(line, offset=offset)
        assert button.begin() is False
        assert isinstance(button.last_error, ConfigurationError)
        assert "wrong range" in button.error_message
        assert line.handles == []
        assert not button.is_open
        with pytest.raises(ResourceError):
            button.value()

    def test_max_line_offset_configurable(self, line):
        button = Button(40, line=line, max_line_offset=53)
        assert button.begin()

    def test_open_failure_reported(self, line):
        line.open_error = ResourceError("chip busy")
        button = _make_button(line)
        assert button.begin() is False
        assert isinstance(button.last_error, ResourceError)
        assert button.error_message == "chip busy"

    def test_begin_after_failure_clears_error(self, line):
        line.open_error = ResourceError("chip busy")
        button = _make_button(line)
        button.begin()
        line.open_error = None
        assert button.begin()
        assert button.last_error is None
        assert button.error_message == ""

    def test_invalid_polarity(self, line):
        with pytest.raises(ConfigurationError):
            Button(17, 5, line=line)

    def test_explicit_polarity_config(self, line):
        cfg = PolarityConfig(Polarity.ACTIVE_LOW, Bias.OFF)
        button = Button(17, cfg, line=line)
        assert button.polarity is cfg


# ===========================================================================
# Polling reads
# ===========================================================================


class TestPolling:

    def test_pull_up_raw_high_is_not_pressed(self, line):
        line.set_level(1)
        button = _make_button(line, polarity=2)
        button.begin()
        assert button.value() == 1
        assert button.state() == 0
        assert not button.is_pressed()

    def test_pull_up_raw_low_is_pressed(self, line):
        line.set_level(0)
        button = _make_button(line, polarity=LegacyPUD.UP)
        button.begin()
        assert button.state() == 1
        assert button.is_pressed()

    @pytest.mark.parametrize("pud", [LegacyPUD.OFF, LegacyPUD.DOWN])
    def test_active_high_follows_raw(self, line, pud):
        button = _make_button(line, polarity=pud)
        button.begin()
        line.set_level(1)
        assert button.state() == 1
        line.set_level(0)
        assert button.state() == 0

    def test_read_before_begin_fails(self, line):
        button = _make_button(line)
        with pytest.raises(ResourceError):
            button.value()
        with pytest.raises(ResourceError):
            button.state()

    def test_read_error_propagates(self, line):
        button = _make_button(line)
        button.begin()
        line.read_error = ResourceError("read failed")
        with pytest.raises(ResourceError, match="read failed"):
            button.state()


class TestCachedGet:

    def test_unknown_before_first_read(self, line):
        button = _make_button(line)
        button.begin()
        with pytest.raises(StateUnknownError):
            button.get()

    def test_polling_read_fills_cache(self, line):
        line.set_level(1)
        button = _make_button(line)
        button.begin()
        button.state()
        line.set_level(0)
        assert button.get() is True
        assert button.last_updated_ns() > 0

    def test_clean_resets_cache(self, line):
        button = _make_button(line)
        button.begin()
        button.state()
        button.clean()
        with pytest.raises(StateUnknownError):
            button.get()


# ===========================================================================
# clean()
# ===========================================================================


class TestClean:

    def test_clean_releases_exactly_once(self, line):
        button = _make_button(line)
        button.begin()
        button.clean()
        button.clean()
        assert line.close_count == 1
        assert line.handles[0].released
        assert not button.is_open

    def test_clean_without_begin(self, line):
        button = _make_button(line)
        button.clean()
        assert line.close_count == 0

    def test_reads_fail_after_clean(self, line):
        button = _make_button(line)
        button.begin()
        button.clean()
        with pytest.raises(ResourceError):
            button.value()

    def test_begin_again_after_clean(self, line):
        button = _make_button(line)
        button.begin()
        button.clean()
        assert button.begin()
        assert len(line.handles) == 2
        assert button.value() == 0

    def test_concurrent_clean(self, line):
        button = _make_button(line)
        button.begin()
        threads = [threading.Thread(target=button.clean) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert line.close_count == 1
