"""
Single push-button line: polled reads and debounced edge callbacks
"""

import threading
import time
from typing import Optional, Union

from .cached_state import CachedState
from .dispatcher import EventDispatcher
from .edge_event import Edge
from .errors import ButtonError, ConfigurationError, ResourceError
from .gpiod_line import GpiodLine
from .hybrid_logger import get_default_logger
from .interfaces import EventSink, IInputLine, IPressedSource, LineHandle
from .polarity import LegacyPUD, PolarityConfig, as_polarity_config, logical_state

DEFAULT_CHIP = "/dev/gpiochip0"
DEFAULT_DEBOUNCE_US = 5000
MAX_LINE_OFFSET = 30


class Button(IPressedSource):
    """
    One button on one GPIO line.

    Construction only records the settings; ``begin()`` requests the line.
    Use either polling (``value()``/``state()``) or the interrupt regime
    (``begin_interrupt()``), not both for the same line.

    ``begin()`` and ``begin_interrupt()`` return False on failure and leave
    the reason in ``error_message`` / ``last_error``. Reads raise.

    Example:
        button = Button(17, LegacyPUD.UP, line=GpiodLine(logger), logger=logger)
        if not button.begin():
            logger.error(f"Init error: {button.error_message}")
        while running:
            if button.state():
                logger.info("Button pressed!")
            time.sleep(0.2)
        button.clean()
    """

    def __init__(self,
                 line_offset: int,
                 polarity: Union[PolarityConfig, LegacyPUD, int] = LegacyPUD.OFF,
                 line: Optional[IInputLine] = None,
                 chip: str = DEFAULT_CHIP,
                 logger=None,
                 max_line_offset: int = MAX_LINE_OFFSET):
        """
        Args:
            line_offset: Line number on the chip (BCM number on a Pi)
            polarity: PolarityConfig, or a legacy PUD value 0/1/2
            line: IInputLine implementation (defaults to GpiodLine)
            chip: Chip identifier passed to the line on ``begin()``
            logger: ClassLogger instance (defaults to the library logger)
            max_line_offset: Highest accepted line offset

        Raises:
            ConfigurationError: ``polarity`` is neither form
        """
        self._logger = (logger or get_default_logger("Button")).for_line(line_offset)
        self.line_offset = line_offset
        self.chip = chip
        self.polarity = as_polarity_config(polarity)
        self.max_line_offset = max_line_offset
        if line is None:
            line = GpiodLine(self._logger)
        self._line = line

        # _lock serializes begin/begin_interrupt/clean; _handle_lock only guards
        # the handle field, so an event sink can read the line during clean()
        self._lock = threading.RLock()
        self._handle_lock = threading.Lock()
        self._handle: Optional[LineHandle] = None
        self._cached = CachedState()
        self._dispatcher = EventDispatcher(line, self._logger)

        self.error_message = ""
        self.last_error: Optional[ButtonError] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _fail(self, error: ButtonError) -> bool:
        self.last_error = error
        self.error_message = str(error)
        self._logger.error(f"Button line {self.line_offset}: {error}")
        return False

    def _validate_offset(self) -> None:
        offset = self.line_offset
        if isinstance(offset, bool) or not isinstance(offset, int) or not 0 <= offset <= self.max_line_offset:
            raise ConfigurationError(
                f"Error Button object: line offset {offset!r} is in wrong range (0-{self.max_line_offset})."
            )

    def begin(self) -> bool:
        """
        Request the line with the configured bias.

        Returns:
            True on success (also when the line is already open)
        """
        with self._lock:
            if self._handle is not None:
                return True
            try:
                self._validate_offset()
                handle = self._line.open(self.chip, self.line_offset, self.polarity.bias)
            except ButtonError as e:
                return self._fail(e)
            with self._handle_lock:
                self._handle = handle
            self.error_message = ""
            self.last_error = None
        self._logger.info(f"Button ready on {self.chip}:{self.line_offset} ({self.polarity})")
        return True

    def begin_interrupt(self,
                        sink: EventSink,
                        edge: Edge = Edge.BOTH,
                        debounce_us: int = DEFAULT_DEBOUNCE_US) -> bool:
        """
        Start delivering debounced edges to ``sink(is_rising, sec, nsec)``.

        The sink runs on the dispatch worker thread, one call at a time.
        Requests the line first if ``begin()`` was not called.

        Args:
            sink: Callback for accepted edges
            edge: Which edges to report (``Edge.BOTH``, ``Edge.RISING``
                  or ``Edge.FALLING``)
            debounce_us: Minimum spacing between accepted edges, 0 disables

        Returns:
            True if the worker is running
        """
        if sink is None or not callable(sink):
            return self._fail(ConfigurationError("Callback is null."))
        if not isinstance(edge, Edge):
            return self._fail(ConfigurationError(f"Invalid edge selector: {edge!r}"))

        with self._lock:
            if self._dispatcher.is_running:
                return self._fail(ConfigurationError("Interrupt dispatch is already active"))
            # Clears a worker that exited on its own after an edge-wait error
            self._dispatcher.stop()
            if not self.begin():
                return False
            try:
                self._dispatcher.start(
                    self._handle, self.polarity, edge, debounce_us, sink,
                    self._cached, on_error=self._on_dispatch_error,
                )
            except ButtonError as e:
                return self._fail(e)
        return True

    def _on_dispatch_error(self, error: ResourceError) -> None:
        self.last_error = error
        self.error_message = str(error)

    def end_interrupt(self) -> None:
        """Stop edge dispatch; no sink call happens after this returns"""
        self._dispatcher.stop()

    def clean(self) -> None:
        """
        Stop edge dispatch and release the line.

        Never raises; safe to call repeatedly, from any thread, and on a
        button that was never started. A ``begin_interrupt()`` running in
        another thread either completes first and is stopped here, or starts
        afterwards on a freshly requested line.

        From inside an event sink prefer ``end_interrupt()``: ``clean()`` there
        waits for any concurrent ``clean()``, which is joining the sink's thread.
        """
        with self._lock:
            self._dispatcher.stop()
            with self._handle_lock:
                handle, self._handle = self._handle, None
            if handle is None:
                return
            try:
                self._line.close(handle)
            except ButtonError as e:
                self._logger.warning(f"Releasing line {self.line_offset} failed: {e}")
            self._cached.clear()
        self._logger.info(f"Button on line {self.line_offset} cleaned up")

    @property
    def is_open(self) -> bool:
        with self._handle_lock:
            return self._handle is not None

    @property
    def interrupt_active(self) -> bool:
        return self._dispatcher.is_running

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def value(self) -> int:
        """
        Raw digital level of the line.

        Returns:
            0 or 1

        Raises:
            ResourceError: The line is not open or the read failed
        """
        with self._handle_lock:
            handle = self._handle
        if handle is None:
            raise ResourceError(f"Button line {self.line_offset} is not open; call begin() first")
        return self._line.read_raw(handle)

    def state(self) -> int:
        """
        Pressed state after polarity correction.

        Returns:
            1 if pressed, 0 if not

        Raises:
            ResourceError: The line is not open or the read failed
        """
        pressed = logical_state(self.value(), self.polarity)
        if not self._dispatcher.is_running:
            self._cached.update(pressed, time.monotonic_ns())
        return 1 if pressed else 0

    def is_pressed(self) -> bool:
        return self.state() == 1

    def get(self) -> bool:
        """
        Last known pressed state without touching the hardware.

        Raises:
            StateUnknownError: No read or accepted edge yet
        """
        pressed, _ = self._cached.snapshot()
        return pressed

    def last_updated_ns(self) -> int:
        """Monotonic timestamp of the cached state"""
        _, timestamp_ns = self._cached.snapshot()
        return timestamp_ns

    def __repr__(self) -> str:
        return f"Button(chip={self.chip!r}, line_offset={self.line_offset}, polarity={self.polarity})"
