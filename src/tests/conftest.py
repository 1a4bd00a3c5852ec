"""Shared fixtures for the button tests."""

from __future__ import annotations

import threading
from typing import List, Tuple

import pytest

from gpio_button import SimulatedLine


@pytest.fixture
def line() -> SimulatedLine:
    return SimulatedLine(initial_level=0, poll_interval_s=0.005)


class SinkRecorder:
    """Event sink that records calls and lets tests wait for a count."""

    def __init__(self) -> None:
        self.calls: List[Tuple[bool, int, int]] = []
        self.threads: List[str] = []
        self._cond = threading.Condition()

    def __call__(self, is_rising: bool, sec: int, nsec: int) -> None:
        with self._cond:
            self.calls.append((is_rising, sec, nsec))
            self.threads.append(threading.current_thread().name)
            self._cond.notify_all()

    def wait_for(self, count: int, timeout: float = 2.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: len(self.calls) >= count, timeout)


@pytest.fixture
def sink() -> SinkRecorder:
    return SinkRecorder()
