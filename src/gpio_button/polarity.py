"""
Polarity and bias configuration, and the raw level to pressed state mapping
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

from .errors import ConfigurationError


class Polarity(Enum):
    ACTIVE_HIGH = "active_high"
    ACTIVE_LOW = "active_low"


class Bias(Enum):
    OFF = "off"
    PULL_DOWN = "pull_down"
    PULL_UP = "pull_up"


class LegacyPUD(IntEnum):
    """Numeric pull-up/down convention: PUD_OFF=0, PUD_DOWN=1, PUD_UP=2"""
    OFF = 0
    DOWN = 1
    UP = 2


@dataclass(frozen=True)
class PolarityConfig:
    """
    Immutable polarity + bias pair for one line.

    Example:
        cfg = PolarityConfig(Polarity.ACTIVE_LOW, Bias.PULL_UP)
        cfg = PolarityConfig.from_legacy_pud(2)   # same thing
    """
    mode: Polarity = Polarity.ACTIVE_HIGH
    bias: Bias = Bias.OFF

    def __post_init__(self):
        if not isinstance(self.mode, Polarity):
            raise ConfigurationError(f"mode must be a Polarity, got {self.mode!r}")
        if not isinstance(self.bias, Bias):
            raise ConfigurationError(f"bias must be a Bias, got {self.bias!r}")

    @property
    def active_low(self) -> bool:
        return self.mode is Polarity.ACTIVE_LOW

    @classmethod
    def from_legacy_pud(cls, pud: Union[int, LegacyPUD]) -> "PolarityConfig":
        """
        Map a legacy PUD value to (mode, bias).

        | PUD | Bias      | Polarity    |
        |-----|-----------|-------------|
        | 0   | OFF       | ACTIVE_HIGH |
        | 1   | PULL_DOWN | ACTIVE_HIGH |
        | 2   | PULL_UP   | ACTIVE_LOW  |

        Raises:
            ConfigurationError: ``pud`` is not 0, 1 or 2
        """
        if isinstance(pud, bool):
            raise ConfigurationError(f"Legacy PUD value must be 0, 1 or 2, got {pud!r}")
        try:
            pud = LegacyPUD(pud)
        except ValueError as e:
            raise ConfigurationError(f"Legacy PUD value must be 0, 1 or 2, got {pud!r}") from e
        return _LEGACY_PUD_TABLE[pud]

    def __str__(self) -> str:
        return f"{self.mode.value}/{self.bias.value}"


_LEGACY_PUD_TABLE = {
    LegacyPUD.OFF: PolarityConfig(Polarity.ACTIVE_HIGH, Bias.OFF),
    LegacyPUD.DOWN: PolarityConfig(Polarity.ACTIVE_HIGH, Bias.PULL_DOWN),
    LegacyPUD.UP: PolarityConfig(Polarity.ACTIVE_LOW, Bias.PULL_UP),
}


def as_polarity_config(polarity: Union[PolarityConfig, int, LegacyPUD]) -> PolarityConfig:
    """Accept either form used at construction time and return the canonical one"""
    if isinstance(polarity, PolarityConfig):
        return polarity
    return PolarityConfig.from_legacy_pud(polarity)


def logical_state(raw: int, cfg: PolarityConfig) -> bool:
    """Pressed state for a raw 0/1 level: ``raw XOR active_low``"""
    return (raw == 1) != cfg.active_low
