"""
Abstract interfaces for line access and pressed-state sources
"""

import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Optional

from .edge_event import Edge, EdgeEvent
from .polarity import Bias

# sink(is_rising, seconds, nanoseconds), called on the dispatch worker thread
EventSink = Callable[[bool, int, int], None]


@dataclass(eq=False)
class LineHandle:
    """
    Ownership token for one requested line.

    Created by ``IInputLine.open()``; ``request`` holds whatever the backend
    needs (a gpiod line request, a BCM channel number, ...). After
    ``IInputLine.close()`` the handle is marked released and every further
    operation on it fails.
    """
    chip: str
    line_offset: int
    bias: Bias
    request: Any = None
    edge: Optional[Edge] = None
    released: bool = False
    pending: Deque[EdgeEvent] = field(default_factory=deque)


class IInputLine(ABC):
    """
    Hardware-facing surface the button depends on.

    Implementations: RPi.GPIO (legacy BCM numbering), libgpiod character
    device, and a simulation harness for tests and development machines.
    All failures are reported as ``ResourceError``.
    """

    @abstractmethod
    def open(self, chip: str, line_offset: int, bias: Bias) -> LineHandle:
        """
        Request the line as an input with the given bias.

        Args:
            chip: Chip identifier (e.g. ``/dev/gpiochip0``); backends that
                  have a single fixed chip ignore it
            line_offset: Line number on the chip
            bias: Pull resistor setting

        Returns:
            LineHandle: Token for the requested line
        """
        pass

    @abstractmethod
    def read_raw(self, handle: LineHandle) -> int:
        """
        Sample the line once without blocking.

        Returns:
            0 or 1
        """
        pass

    @abstractmethod
    def configure_edges(self, handle: LineHandle, edge: Edge) -> None:
        """Enable edge detection for ``edge`` on an open line"""
        pass

    @abstractmethod
    def wait_for_edge(self, handle: LineHandle, edge: Edge,
                      cancel: threading.Event) -> Optional[EdgeEvent]:
        """
        Block until the next edge event or until ``cancel`` is set.

        Must notice ``cancel`` within a bounded delay even when the line
        stays quiet.

        Returns:
            EdgeEvent, or None when cancelled
        """
        pass

    @abstractmethod
    def release_edges(self, handle: LineHandle) -> None:
        """Disable edge detection and drop any queued events"""
        pass

    @abstractmethod
    def close(self, handle: Optional[LineHandle]) -> None:
        """Release the line. Idempotent; accepts None and released handles."""
        pass


class IPressedSource(ABC):
    """Anything that can report whether a button is currently pressed"""

    @abstractmethod
    def is_pressed(self) -> bool:
        """
        Sample the pressed state.

        Raises:
            ButtonError: The sample could not be taken
        """
        pass
