"""
Button configuration
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .edge_event import Edge
from .errors import ConfigurationError
from .gpio_line import GPIOLine
from .gpiod_line import GpiodLine
from .hold_state_machine import DEFAULT_COUNTDOWN_FROM, DEFAULT_TICK_INTERVAL_S
from .interfaces import IInputLine
from .polarity import Bias, Polarity, PolarityConfig
from .simulated_line import SimulatedLine
from .system_actions import REBOOT_COMMAND, SHUTDOWN_COMMAND

BACKENDS = ("gpiod", "rpi", "simulated")


@dataclass
class ButtonConfig:
    """Hardware configuration for one button line"""
    line_offset: int
    chip: str = "/dev/gpiochip0"
    polarity: Polarity = Polarity.ACTIVE_HIGH
    bias: Bias = Bias.OFF
    pud: Optional[int] = None      # legacy 0/1/2, overrides polarity/bias when set
    edge: Edge = Edge.BOTH
    debounce_us: int = 5000
    backend: str = "gpiod"
    max_line_offset: int = 30

    def polarity_config(self) -> PolarityConfig:
        """Effective polarity/bias pair"""
        if self.pud is not None:
            return PolarityConfig.from_legacy_pud(self.pud)
        return PolarityConfig(self.polarity, self.bias)

    def validate(self) -> None:
        """Basic validation of configuration"""
        if isinstance(self.line_offset, bool) or not isinstance(self.line_offset, int):
            raise ConfigurationError(f"line_offset must be an integer, got {self.line_offset!r}")
        if not (0 <= self.line_offset <= self.max_line_offset):
            raise ConfigurationError(
                f"line_offset {self.line_offset} out of valid range (0-{self.max_line_offset})"
            )
        if not self.chip:
            raise ConfigurationError("chip must not be empty")
        if not isinstance(self.edge, Edge):
            raise ConfigurationError(f"Invalid edge selector: {self.edge!r}")
        if isinstance(self.debounce_us, bool) or not isinstance(self.debounce_us, int) or self.debounce_us < 0:
            raise ConfigurationError(f"debounce_us must be a non-negative integer, got {self.debounce_us!r}")
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"backend must be one of {', '.join(BACKENDS)}, got {self.backend!r}")
        self.polarity_config()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ButtonConfig":
        """
        Build from a plain mapping (e.g. a parsed config file section).

        Enum fields take their string values: ``polarity: active_low``,
        ``bias: pull_up``, ``edge: both``.
        """
        if "line_offset" not in data:
            raise ConfigurationError("line_offset is required")
        try:
            config = cls(
                line_offset=data["line_offset"],
                chip=data.get("chip", "/dev/gpiochip0"),
                polarity=Polarity(data.get("polarity", Polarity.ACTIVE_HIGH.value)),
                bias=Bias(data.get("bias", Bias.OFF.value)),
                pud=data.get("pud"),
                edge=Edge(data.get("edge", Edge.BOTH.value)),
                debounce_us=data.get("debounce_us", 5000),
                backend=data.get("backend", "gpiod"),
                max_line_offset=data.get("max_line_offset", 30),
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        config.validate()
        return config


@dataclass
class ResetButtonConfig:
    """Hold-to-reset button: line settings plus countdown timing"""
    button: ButtonConfig
    countdown_from: int = DEFAULT_COUNTDOWN_FROM
    tick_interval_s: float = DEFAULT_TICK_INTERVAL_S
    shutdown_command: List[str] = field(default_factory=lambda: list(SHUTDOWN_COMMAND))
    reboot_command: List[str] = field(default_factory=lambda: list(REBOOT_COMMAND))

    def validate(self) -> None:
        self.button.validate()
        if isinstance(self.countdown_from, bool) or not isinstance(self.countdown_from, int) \
                or self.countdown_from < 1:
            raise ConfigurationError(f"countdown_from must be an integer >= 1, got {self.countdown_from!r}")
        if isinstance(self.tick_interval_s, bool) or not isinstance(self.tick_interval_s, (int, float)) \
                or self.tick_interval_s < 0:
            raise ConfigurationError(f"tick_interval_s must be a number >= 0, got {self.tick_interval_s!r}")
        if not self.shutdown_command or not self.reboot_command:
            raise ConfigurationError("shutdown_command and reboot_command must not be empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResetButtonConfig":
        if not isinstance(data.get("button"), dict):
            raise ConfigurationError("button must be a mapping")
        config = cls(
            button=ButtonConfig.from_dict(data["button"]),
            countdown_from=data.get("countdown_from", DEFAULT_COUNTDOWN_FROM),
            tick_interval_s=data.get("tick_interval_s", DEFAULT_TICK_INTERVAL_S),
        )
        if "shutdown_command" in data:
            config.shutdown_command = list(data["shutdown_command"])
        if "reboot_command" in data:
            config.reboot_command = list(data["reboot_command"])
        config.validate()
        return config


def create_line(backend: str, logger=None) -> IInputLine:
    """
    Line implementation for a backend name.

    Args:
        backend: ``"gpiod"``, ``"rpi"`` or ``"simulated"``
        logger: ClassLogger passed on to the line
    """
    if backend == "gpiod":
        return GpiodLine(logger)
    if backend == "rpi":
        return GPIOLine(logger)
    if backend == "simulated":
        return SimulatedLine(logger=logger)
    raise ConfigurationError(f"backend must be one of {', '.join(BACKENDS)}, got {backend!r}")
