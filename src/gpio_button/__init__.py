"""
GPIO Button Package

Single push-button input: polarity/bias normalization, polled reads,
debounced edge callbacks on a background worker, and a hold-to-reset
countdown that shuts down or reboots the system.
"""

from .button import Button
from .cached_state import CachedState
from .config import ButtonConfig, ResetButtonConfig, create_line
from .debounce import DebounceFilter
from .dispatcher import EventDispatcher
from .edge_event import Edge, EdgeDirection, EdgeEvent
from .errors import ActionError, ButtonError, ConfigurationError, ResourceError, StateUnknownError
from .gpio_line import GPIOLine
from .gpiod_line import GpiodLine
from .hold_state_machine import CountdownPhase, HoldStateMachine
from .hybrid_logger import ClassLogger, ColoredFormatter, HybridLogger, get_default_logger
from .interfaces import EventSink, IInputLine, IPressedSource, LineHandle
from .polarity import Bias, LegacyPUD, Polarity, PolarityConfig, logical_state
from .reset_button import ResetButton
from .simulated_line import SimulatedLine
from .system_actions import SystemPowerActions

__all__ = [
    "ActionError",
    "Bias",
    "Button",
    "ButtonConfig",
    "ButtonError",
    "CachedState",
    "ClassLogger",
    "ColoredFormatter",
    "ConfigurationError",
    "CountdownPhase",
    "DebounceFilter",
    "Edge",
    "EdgeDirection",
    "EdgeEvent",
    "EventDispatcher",
    "EventSink",
    "GPIOLine",
    "GpiodLine",
    "HoldStateMachine",
    "HybridLogger",
    "IInputLine",
    "IPressedSource",
    "LegacyPUD",
    "LineHandle",
    "Polarity",
    "PolarityConfig",
    "ResetButton",
    "ResetButtonConfig",
    "ResourceError",
    "SimulatedLine",
    "StateUnknownError",
    "SystemPowerActions",
    "create_line",
    "get_default_logger",
    "logical_state",
]
