"""
Background worker turning line edges into debounced state-change callbacks
"""

import threading
from typing import Callable, Optional

from .cached_state import CachedState
from .debounce import DebounceFilter
from .edge_event import Edge
from .errors import ConfigurationError, ResourceError
from .hybrid_logger import get_default_logger
from .interfaces import EventSink, IInputLine, LineHandle
from .polarity import PolarityConfig, logical_state


class EventDispatcher:
    """
    One worker thread per active line.

    The worker blocks in ``IInputLine.wait_for_edge()``, drops bounces through
    a ``DebounceFilter``, maps accepted edges to a logical state, stores it in
    the ``CachedState`` and then calls the sink. Callbacks are serialized and
    delivered in the order the line reports edges.

    ``stop()`` sets the cancellation event, joins the worker and releases edge
    detection; once it returns no further sink call happens.

    Example:
        dispatcher = EventDispatcher(line, logger)
        dispatcher.start(handle, PolarityConfig.from_legacy_pud(2), Edge.BOTH,
                         5000, on_edge, cached_state)
        ...
        dispatcher.stop()
    """

    def __init__(self, line: IInputLine, logger=None):
        """
        Args:
            line: Line implementation the handle belongs to
            logger: ClassLogger instance (defaults to the library logger)
        """
        self._line = line
        self._logger = logger or get_default_logger("EventDispatcher")
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._cancel: Optional[threading.Event] = None
        self._handle: Optional[LineHandle] = None
        self.last_error: Optional[ResourceError] = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self,
              handle: LineHandle,
              polarity: PolarityConfig,
              edge: Edge,
              debounce_us: int,
              sink: EventSink,
              cached_state: CachedState,
              on_error: Optional[Callable[[ResourceError], None]] = None) -> None:
        """
        Enable edge detection and launch the worker.

        Raises:
            ConfigurationError: Missing sink, bad edge selector or debounce
                                window, or a worker is already running
            ResourceError: The line refused edge detection
        """
        if sink is None or not callable(sink):
            raise ConfigurationError("Callback is null.")
        if not isinstance(edge, Edge):
            raise ConfigurationError(f"Invalid edge selector: {edge!r}")
        debounce = DebounceFilter(debounce_us)

        with self._lock:
            if self._thread is not None:
                raise ConfigurationError("Event dispatcher is already running")
            self._line.configure_edges(handle, edge)

            cancel = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(handle, edge, cancel, debounce, polarity, sink, cached_state, on_error),
                name=f"gpio-button-{handle.line_offset}",
                daemon=True,
            )
            self._thread = thread
            self._cancel = cancel
            self._handle = handle
            self.last_error = None
            thread.start()

        self._logger.info(
            f"Dispatching {edge.value} edges on line {handle.line_offset} "
            f"(debounce {debounce_us}us, {polarity})"
        )

    def _run(self, handle, edge, cancel, debounce, polarity, sink, cached_state, on_error) -> None:
        while not cancel.is_set():
            try:
                event = self._wait(handle, edge, cancel)
            except ResourceError as e:
                self.last_error = e
                self._logger.error(f"Edge wait failed on line {handle.line_offset}, dispatcher exiting", e)
                if on_error is not None:
                    on_error(e)
                return

            if event is None:
                break

            if not debounce.accept(event):
                self._logger.debug(f"Bounce rejected: {event}")
                continue

            # Level right after the edge: 1 for rising, 0 for falling
            pressed = logical_state(1 if event.is_rising else 0, polarity)
            cached_state.update(pressed, event.timestamp_ns)
            self._logger.debug(f"Edge accepted: {event} (pressed={pressed})")

            if cancel.is_set():
                break
            try:
                sink(event.is_rising, event.seconds, event.nanoseconds)
            except Exception as e:
                self._logger.error(f"Event sink raised on line {handle.line_offset}", e)

        self._logger.debug(f"Dispatcher worker for line {handle.line_offset} exited")

    def _wait(self, handle, edge, cancel):
        try:
            return self._line.wait_for_edge(handle, edge, cancel)
        except ResourceError:
            raise
        except Exception as e:
            # Backend errors outside the ResourceError contract still end the worker
            raise ResourceError(f"Edge wait on line {handle.line_offset} failed: {e!r}") from e

    def stop(self) -> None:
        """
        Stop the worker and release edge detection.

        Never raises and may be called from any thread, repeatedly. When
        called from inside the sink it cannot join its own thread; the worker
        then exits as soon as the sink returns.
        """
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._cancel.set()

        if thread is not threading.current_thread():
            thread.join()

        with self._lock:
            if self._thread is not thread:
                # Another caller finished the shutdown
                return
            handle = self._handle
            self._thread = None
            self._cancel = None
            self._handle = None

        try:
            self._line.release_edges(handle)
        except ResourceError as e:
            self._logger.warning(f"Releasing edge detection on line {handle.line_offset} failed: {e}")
        self._logger.info(f"Dispatcher for line {handle.line_offset} stopped")
