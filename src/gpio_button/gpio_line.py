"""
Input line implementation using RPi.GPIO (BCM numbering)
"""

import threading
import time
from typing import Optional

try:
    import RPi.GPIO as GPIO
except ImportError:
    GPIO = None

from .edge_event import Edge, EdgeDirection, EdgeEvent
from .errors import ResourceError
from .hybrid_logger import get_default_logger
from .interfaces import IInputLine, LineHandle
from .polarity import Bias


class GPIOLine(IInputLine):
    """
    Legacy register-mapped GPIO access through RPi.GPIO.

    The chip identifier is ignored: RPi.GPIO drives the SoC's single bank in
    BCM numbering. RPi.GPIO's ``wait_for_edge`` reports no timestamp or
    direction, so the event is stamped with ``time.monotonic_ns()`` on return
    and, for ``Edge.BOTH``, the direction comes from the level read right
    after the edge.

    Example:
        line = GPIOLine(logger)
        button = Button(17, LegacyPUD.UP, line=line, logger=logger)
    """

    def __init__(self, logger=None, wait_slice_ms: int = 100):
        """
        Args:
            logger: ClassLogger instance (defaults to the library logger)
            wait_slice_ms: Longest single blocking wait before cancellation
                           is re-checked
        """
        self._logger = logger or get_default_logger("GPIOLine")
        self._wait_slice_ms = wait_slice_ms

    @staticmethod
    def _require_gpio() -> None:
        if GPIO is None:
            raise ResourceError("RPi.GPIO is required but not available")

    @staticmethod
    def _check(handle: Optional[LineHandle]) -> None:
        if handle is None or handle.released:
            raise ResourceError("Line is not open")

    def open(self, chip: str, line_offset: int, bias: Bias) -> LineHandle:
        self._require_gpio()
        pull_mode = {
            Bias.OFF: GPIO.PUD_OFF,
            Bias.PULL_DOWN: GPIO.PUD_DOWN,
            Bias.PULL_UP: GPIO.PUD_UP,
        }[bias]
        try:
            GPIO.setmode(GPIO.BCM)
            GPIO.setup(line_offset, GPIO.IN, pull_up_down=pull_mode)
        except (RuntimeError, ValueError) as e:
            self._logger.error(f"GPIO setup failed on GPIO{line_offset}", e)
            raise ResourceError(f"GPIO setup failed on GPIO{line_offset}: {e}") from e

        self._logger.info(f"GPIO{line_offset} configured as input ({bias.value})")
        return LineHandle(chip=chip, line_offset=line_offset, bias=bias, request=line_offset)

    def read_raw(self, handle: LineHandle) -> int:
        self._check(handle)
        try:
            return 1 if GPIO.input(handle.request) == GPIO.HIGH else 0
        except (RuntimeError, ValueError) as e:
            raise ResourceError(f"Reading GPIO{handle.request} failed: {e}") from e

    def configure_edges(self, handle: LineHandle, edge: Edge) -> None:
        # wait_for_edge arms detection itself; only remember the selector
        self._check(handle)
        handle.edge = edge

    def wait_for_edge(self, handle: LineHandle, edge: Edge,
                      cancel: threading.Event) -> Optional[EdgeEvent]:
        self._check(handle)
        gpio_edge = {
            Edge.RISING: GPIO.RISING,
            Edge.FALLING: GPIO.FALLING,
            Edge.BOTH: GPIO.BOTH,
        }[edge]
        channel = handle.request

        while not cancel.is_set():
            try:
                result = GPIO.wait_for_edge(channel, gpio_edge, timeout=self._wait_slice_ms)
            except (RuntimeError, ValueError) as e:
                raise ResourceError(f"Edge wait on GPIO{channel} failed: {e}") from e
            if result is None:
                continue

            timestamp_ns = time.monotonic_ns()
            if edge is Edge.RISING:
                direction = EdgeDirection.RISING
            elif edge is Edge.FALLING:
                direction = EdgeDirection.FALLING
            else:
                level = self.read_raw(handle)
                direction = EdgeDirection.RISING if level else EdgeDirection.FALLING
            return EdgeEvent(direction, timestamp_ns)
        return None

    def release_edges(self, handle: LineHandle) -> None:
        if handle is None or handle.released:
            return
        handle.edge = None
        try:
            GPIO.remove_event_detect(handle.request)
        except (RuntimeError, ValueError) as e:
            raise ResourceError(f"Removing edge detection on GPIO{handle.request} failed: {e}") from e

    def close(self, handle: Optional[LineHandle]) -> None:
        if handle is None or handle.released or GPIO is None:
            return
        handle.released = True
        try:
            GPIO.cleanup(handle.request)
            self._logger.info(f"GPIO{handle.request} cleaned up")
        except (RuntimeError, ValueError) as e:
            self._logger.warning(f"GPIO{handle.request} cleanup failed: {e}")
