"""
Edge selectors and timestamped edge events
"""

from dataclasses import dataclass
from enum import Enum

NANOS_PER_SECOND = 1_000_000_000


class Edge(Enum):
    """Which transitions a line should report"""
    RISING = "rising"
    FALLING = "falling"
    BOTH = "both"


class EdgeDirection(Enum):
    RISING = "rising"
    FALLING = "falling"


@dataclass(frozen=True)
class EdgeEvent:
    """
    One detected transition on a line.

    ``timestamp_ns`` is a monotonic timestamp in nanoseconds as reported by
    the line; ``seconds`` and ``nanoseconds`` split it for the event sink.
    """
    direction: EdgeDirection
    timestamp_ns: int

    @property
    def is_rising(self) -> bool:
        return self.direction is EdgeDirection.RISING

    @property
    def seconds(self) -> int:
        return self.timestamp_ns // NANOS_PER_SECOND

    @property
    def nanoseconds(self) -> int:
        return self.timestamp_ns % NANOS_PER_SECOND

    @classmethod
    def from_parts(cls, direction: EdgeDirection, seconds: int, nanoseconds: int) -> "EdgeEvent":
        return cls(direction, seconds * NANOS_PER_SECOND + nanoseconds)

    def matches(self, edge: Edge) -> bool:
        """True if this event is one ``edge`` asks for"""
        return edge is Edge.BOTH or edge.value == self.direction.value

    def __str__(self) -> str:
        return f"{self.direction.value}@{self.seconds}.{self.nanoseconds:09d}"
