"""
Reset button: a Button wired to a HoldStateMachine and the system power actions
"""

from typing import Callable, Optional, Union

from .button import DEFAULT_CHIP, Button
from .config import ResetButtonConfig, create_line
from .hold_state_machine import DEFAULT_COUNTDOWN_FROM, DEFAULT_TICK_INTERVAL_S, HoldStateMachine
from .hybrid_logger import get_default_logger
from .interfaces import IInputLine
from .polarity import LegacyPUD, PolarityConfig
from .system_actions import SystemPowerActions


class ResetButton:
    """
    Hold for the full countdown to shut down, release early to reboot.

    Example:
        reset = ResetButton(27, LegacyPUD.UP, logger=logger)
        if not reset.begin():
            sys.exit(reset.error_message)
        while True:
            reset.check()
            time.sleep(0.1)
    """

    def __init__(self,
                 line_offset: int,
                 polarity: Union[PolarityConfig, LegacyPUD, int] = LegacyPUD.OFF,
                 line: Optional[IInputLine] = None,
                 chip: str = DEFAULT_CHIP,
                 logger=None,
                 shutdown_action: Optional[Callable[[], None]] = None,
                 reboot_action: Optional[Callable[[], None]] = None,
                 countdown_from: int = DEFAULT_COUNTDOWN_FROM,
                 tick_interval_s: float = DEFAULT_TICK_INTERVAL_S,
                 on_tick: Optional[Callable[[int], None]] = None):
        self._logger = logger or get_default_logger("ResetButton")
        self.button = Button(line_offset, polarity, line=line, chip=chip, logger=self._logger)
        if shutdown_action is None or reboot_action is None:
            actions = SystemPowerActions(self._logger)
            shutdown_action = shutdown_action or actions.shutdown
            reboot_action = reboot_action or actions.reboot
        self.hold = HoldStateMachine(
            self.button, shutdown_action, reboot_action, self._logger,
            countdown_from=countdown_from, tick_interval_s=tick_interval_s, on_tick=on_tick,
        )

    @classmethod
    def from_config(cls, config: ResetButtonConfig, logger=None,
                    line: Optional[IInputLine] = None) -> "ResetButton":
        """Build from a validated ResetButtonConfig; ``line`` overrides the configured backend"""
        config.validate()
        button_cfg = config.button
        actions = SystemPowerActions(
            logger, shutdown_command=config.shutdown_command, reboot_command=config.reboot_command,
        )
        return cls(
            button_cfg.line_offset,
            button_cfg.polarity_config(),
            line=line or create_line(button_cfg.backend, logger),
            chip=button_cfg.chip,
            logger=logger,
            shutdown_action=actions.shutdown,
            reboot_action=actions.reboot,
            countdown_from=config.countdown_from,
            tick_interval_s=config.tick_interval_s,
        )

    @property
    def error_message(self) -> str:
        return self.button.error_message

    def begin(self) -> bool:
        return self.button.begin()

    def clean(self) -> None:
        self.button.clean()

    def state(self) -> int:
        return self.button.state()

    def check(self) -> bool:
        """See ``HoldStateMachine.check()``"""
        return self.hold.check()
