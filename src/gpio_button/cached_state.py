"""
Last known logical state of a line, shared between threads
"""

import threading
from typing import Optional, Tuple

from .errors import StateUnknownError


class CachedState:
    """
    Lock-guarded (logical, last_updated_ns) pair.

    Written by the event dispatcher (or by polling reads while no dispatcher
    runs), read from any thread. Unset until the first update.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._logical: Optional[bool] = None
        self._last_updated_ns: Optional[int] = None

    def update(self, logical: bool, timestamp_ns: int) -> None:
        with self._lock:
            self._logical = logical
            self._last_updated_ns = timestamp_ns

    def snapshot(self) -> Tuple[bool, int]:
        """
        Returns:
            (logical, last_updated_ns)

        Raises:
            StateUnknownError: Nothing has been recorded yet
        """
        with self._lock:
            if self._logical is None:
                raise StateUnknownError("Button state unknown: no sample or edge recorded yet")
            return self._logical, self._last_updated_ns

    @property
    def is_known(self) -> bool:
        with self._lock:
            return self._logical is not None

    def clear(self) -> None:
        with self._lock:
            self._logical = None
            self._last_updated_ns = None
