"""
Simulated input line for tests and development machines without GPIO
"""

import threading
import time
from collections import deque
from typing import Deque, List, Optional

from .edge_event import Edge, EdgeDirection, EdgeEvent
from .errors import ResourceError
from .hybrid_logger import get_default_logger
from .interfaces import IInputLine, LineHandle
from .polarity import Bias


class SimulatedLine(IInputLine):
    """
    In-memory line driven by the caller.

    The raw level is set directly with ``set_level()``; ``inject_edge()``
    changes the level and, when edge detection is enabled, queues an event
    for ``wait_for_edge()``. Failures can be armed to exercise error paths.

    Example:
        line = SimulatedLine(initial_level=1)          # pull-up, released
        button = Button(17, LegacyPUD.UP, line=line)
        button.begin()
        line.set_level(0)                              # press
        assert button.state() == 1
    """

    def __init__(self, initial_level: int = 0, logger=None, poll_interval_s: float = 0.01):
        """
        Args:
            initial_level: Raw level (0/1) reported before any change
            logger: ClassLogger instance (defaults to the library logger)
            poll_interval_s: How often a blocked wait re-checks cancellation
        """
        self._logger = logger or get_default_logger("SimulatedLine")
        self._poll_interval_s = poll_interval_s
        self._cond = threading.Condition()
        self._level = 1 if initial_level else 0
        self._events: Deque[EdgeEvent] = deque()
        self._edge: Optional[Edge] = None
        self.handles: List[LineHandle] = []
        self.close_count = 0
        self.open_error: Optional[ResourceError] = None
        self.read_error: Optional[ResourceError] = None
        self.edge_error: Optional[ResourceError] = None
        self.wait_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Test controls
    # ------------------------------------------------------------------

    @property
    def level(self) -> int:
        with self._cond:
            return self._level

    def set_level(self, level: int) -> None:
        """Change the raw level without producing an edge event"""
        with self._cond:
            self._level = 1 if level else 0

    def inject_edge(self, direction: EdgeDirection, timestamp_ns: Optional[int] = None) -> None:
        """
        Simulate a transition.

        The level follows the edge direction. The event is queued only while
        edge detection is enabled and the selector includes ``direction``.
        """
        if timestamp_ns is None:
            timestamp_ns = time.monotonic_ns()
        event = EdgeEvent(direction, timestamp_ns)
        with self._cond:
            self._level = 1 if direction is EdgeDirection.RISING else 0
            if self._edge is not None and event.matches(self._edge):
                self._events.append(event)
                self._cond.notify_all()

    @property
    def edges_enabled(self) -> bool:
        with self._cond:
            return self._edge is not None

    # ------------------------------------------------------------------
    # IInputLine
    # ------------------------------------------------------------------

    def open(self, chip: str, line_offset: int, bias: Bias) -> LineHandle:
        if self.open_error is not None:
            raise self.open_error
        handle = LineHandle(chip=chip, line_offset=line_offset, bias=bias)
        self.handles.append(handle)
        self._logger.debug(f"Simulated line {chip}:{line_offset} opened ({bias.value})")
        return handle

    def _check(self, handle: Optional[LineHandle]) -> None:
        if handle is None or handle.released:
            raise ResourceError("Line is not open")

    def read_raw(self, handle: LineHandle) -> int:
        self._check(handle)
        if self.read_error is not None:
            raise self.read_error
        with self._cond:
            return self._level

    def configure_edges(self, handle: LineHandle, edge: Edge) -> None:
        self._check(handle)
        if self.edge_error is not None:
            raise self.edge_error
        with self._cond:
            self._edge = edge
            self._events.clear()
        handle.edge = edge

    def wait_for_edge(self, handle: LineHandle, edge: Edge,
                      cancel: threading.Event) -> Optional[EdgeEvent]:
        self._check(handle)
        with self._cond:
            while not cancel.is_set():
                if self.wait_error is not None:
                    error, self.wait_error = self.wait_error, None
                    raise error
                if self._events:
                    return self._events.popleft()
                self._cond.wait(self._poll_interval_s)
        return None

    def release_edges(self, handle: LineHandle) -> None:
        with self._cond:
            self._edge = None
            self._events.clear()
        if handle is not None:
            handle.edge = None

    def close(self, handle: Optional[LineHandle]) -> None:
        if handle is None or handle.released:
            return
        self.release_edges(handle)
        handle.released = True
        self.close_count += 1
        self._logger.debug(f"Simulated line {handle.chip}:{handle.line_offset} closed")
