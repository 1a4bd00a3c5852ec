"""
Input line implementation using the libgpiod v2 character-device API
"""

import threading
from datetime import timedelta
from typing import Optional

try:
    import gpiod
    from gpiod.exception import ChipClosedError, RequestReleasedError
    from gpiod.line import Bias as GpiodBias, Direction, Edge as GpiodEdge, Value
    LINE_ERRORS = (OSError, ValueError, ChipClosedError, RequestReleasedError)
except ImportError:
    gpiod = None
    LINE_ERRORS = (OSError, ValueError)

from .edge_event import Edge, EdgeDirection, EdgeEvent
from .errors import ResourceError
from .hybrid_logger import get_default_logger
from .interfaces import IInputLine, LineHandle
from .polarity import Bias

CONSUMER = "gpio-button"


class GpiodLine(IInputLine):
    """
    Line access through ``gpiod.request_lines``.

    Edge events carry kernel timestamps, so debounce decisions use the time
    the edge actually happened rather than the time it was read.

    Example:
        line = GpiodLine(logger)
        button = Button(17, LegacyPUD.UP, chip="/dev/gpiochip0", line=line)
    """

    def __init__(self, logger=None, wait_slice_s: float = 0.1, consumer: str = CONSUMER):
        """
        Args:
            logger: ClassLogger instance (defaults to the library logger)
            wait_slice_s: Longest single blocking wait before cancellation
                          is re-checked
            consumer: Consumer label shown by ``gpioinfo``
        """
        self._logger = logger or get_default_logger("GpiodLine")
        self._wait_slice = timedelta(seconds=wait_slice_s)
        self._consumer = consumer

    @staticmethod
    def _check(handle: Optional[LineHandle]) -> None:
        if handle is None or handle.released:
            raise ResourceError("Line is not open")

    @staticmethod
    def _settings(bias: Bias, edge: Optional[Edge] = None):
        gpiod_bias = {
            Bias.OFF: GpiodBias.DISABLED,
            Bias.PULL_DOWN: GpiodBias.PULL_DOWN,
            Bias.PULL_UP: GpiodBias.PULL_UP,
        }[bias]
        gpiod_edge = {
            None: GpiodEdge.NONE,
            Edge.RISING: GpiodEdge.RISING,
            Edge.FALLING: GpiodEdge.FALLING,
            Edge.BOTH: GpiodEdge.BOTH,
        }[edge]
        return gpiod.LineSettings(direction=Direction.INPUT, bias=gpiod_bias, edge_detection=gpiod_edge)

    def open(self, chip: str, line_offset: int, bias: Bias) -> LineHandle:
        if gpiod is None:
            raise ResourceError("gpiod is required but not available")
        try:
            request = gpiod.request_lines(
                chip,
                consumer=self._consumer,
                config={line_offset: self._settings(bias)},
            )
        except LINE_ERRORS as e:
            self._logger.error(f"Requesting {chip}:{line_offset} failed", e)
            raise ResourceError(f"Requesting {chip}:{line_offset} failed: {e}") from e

        self._logger.info(f"Line {chip}:{line_offset} requested as input ({bias.value})")
        return LineHandle(chip=chip, line_offset=line_offset, bias=bias, request=request)

    def read_raw(self, handle: LineHandle) -> int:
        self._check(handle)
        try:
            return 1 if handle.request.get_value(handle.line_offset) == Value.ACTIVE else 0
        except LINE_ERRORS as e:
            raise ResourceError(f"Reading {handle.chip}:{handle.line_offset} failed: {e}") from e

    def configure_edges(self, handle: LineHandle, edge: Edge) -> None:
        self._check(handle)
        try:
            handle.request.reconfigure_lines(config={handle.line_offset: self._settings(handle.bias, edge)})
        except LINE_ERRORS as e:
            raise ResourceError(f"Enabling {edge.value} edges on {handle.chip}:{handle.line_offset} failed: {e}") from e
        handle.edge = edge
        handle.pending.clear()

    def wait_for_edge(self, handle: LineHandle, edge: Edge,
                      cancel: threading.Event) -> Optional[EdgeEvent]:
        self._check(handle)
        request = handle.request
        while not cancel.is_set():
            if handle.pending:
                return handle.pending.popleft()
            try:
                if not request.wait_edge_events(self._wait_slice):
                    continue
                for raw_event in request.read_edge_events():
                    if raw_event.event_type == gpiod.EdgeEvent.Type.RISING_EDGE:
                        direction = EdgeDirection.RISING
                    else:
                        direction = EdgeDirection.FALLING
                    handle.pending.append(EdgeEvent(direction, raw_event.timestamp_ns))
            except LINE_ERRORS as e:
                raise ResourceError(f"Edge wait on {handle.chip}:{handle.line_offset} failed: {e}") from e
        return None

    def release_edges(self, handle: LineHandle) -> None:
        if handle is None or handle.released:
            return
        handle.pending.clear()
        handle.edge = None
        try:
            handle.request.reconfigure_lines(config={handle.line_offset: self._settings(handle.bias)})
        except LINE_ERRORS as e:
            raise ResourceError(f"Disabling edges on {handle.chip}:{handle.line_offset} failed: {e}") from e

    def close(self, handle: Optional[LineHandle]) -> None:
        if handle is None or handle.released:
            return
        handle.released = True
        handle.pending.clear()
        try:
            handle.request.release()
            self._logger.info(f"Line {handle.chip}:{handle.line_offset} released")
        except LINE_ERRORS as e:
            self._logger.warning(f"Releasing {handle.chip}:{handle.line_offset} failed: {e}")
