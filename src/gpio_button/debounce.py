"""
Time-window debounce filter for edge events
"""

from typing import Optional

from .edge_event import EdgeEvent
from .errors import ConfigurationError

NANOS_PER_MICRO = 1_000


class DebounceFilter:
    """
    Rejects edge events that arrive less than ``duration_us`` after the last
    accepted one.

    Rising and falling edges share one watermark: contact bounce shows up as
    fast alternating transitions and all of them must be suppressed together.
    Rejected events never move the watermark. A window of 0 accepts
    everything.

    Example:
        f = DebounceFilter(5000)
        f.accept(EdgeEvent(EdgeDirection.FALLING, 0))           # True
        f.accept(EdgeEvent(EdgeDirection.RISING, 2_000_000))    # False, bounce
        f.accept(EdgeEvent(EdgeDirection.RISING, 8_000_000))    # True
    """

    def __init__(self, duration_us: int):
        if isinstance(duration_us, bool) or not isinstance(duration_us, int) or duration_us < 0:
            raise ConfigurationError(f"Debounce window must be a non-negative integer (us), got {duration_us!r}")
        self._duration_ns = duration_us * NANOS_PER_MICRO
        self.duration_us = duration_us
        self.last_accepted_ns: Optional[int] = None

    def accept(self, event: EdgeEvent) -> bool:
        """
        Decide whether ``event`` passes the filter.

        Returns:
            True if accepted (and recorded as the new watermark)
        """
        if self.last_accepted_ns is not None and self._duration_ns > 0:
            if event.timestamp_ns - self.last_accepted_ns < self._duration_ns:
                return False
        self.last_accepted_ns = event.timestamp_ns
        return True

    def reset(self) -> None:
        """Forget the watermark, so the next event is accepted"""
        self.last_accepted_ns = None
