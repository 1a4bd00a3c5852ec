"""
Hold-to-reset countdown: shutdown when held through, reboot when released
"""

import time
from enum import Enum
from typing import Callable, Optional

from .errors import ButtonError
from .hybrid_logger import get_default_logger
from .interfaces import IPressedSource

DEFAULT_COUNTDOWN_FROM = 3
DEFAULT_TICK_INTERVAL_S = 1.0


class CountdownPhase(Enum):
    """Where the last ``check()`` is, or ended up"""
    IDLE = "idle"
    COUNTING = "counting"
    SHUTDOWN = "shutdown"
    REBOOT = "reboot"


class HoldStateMachine:
    """
    Decides between shutdown and reboot from how long a button stays pressed.

    ``check()`` samples the source once. Not pressed: returns False at once.
    Pressed: announces the reset, waits one interval, then reports ticks
    3, 2, 1 with one interval after each, and samples again (≈4 s with the
    defaults). Still pressed means shutdown, released means reboot. The
    action is expected to end the process.

    ``phase`` is IDLE between checks, COUNTING during the countdown, and
    SHUTDOWN or REBOOT once the action has been chosen.

    ``check()`` blocks the calling thread for the whole countdown; never call
    it from a dispatch worker (an event sink), it would stall edge delivery.

    Example:
        hold = HoldStateMachine(button, actions.shutdown, actions.reboot, logger)
        while True:
            hold.check()
            time.sleep(0.1)
    """

    def __init__(self,
                 source: IPressedSource,
                 shutdown_action: Callable[[], None],
                 reboot_action: Callable[[], None],
                 logger=None,
                 countdown_from: int = DEFAULT_COUNTDOWN_FROM,
                 tick_interval_s: float = DEFAULT_TICK_INTERVAL_S,
                 on_tick: Optional[Callable[[int], None]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            source: Pressed-state source, usually a Button
            shutdown_action: Called when the button is held through the countdown
            reboot_action: Called when the button was released during it
            logger: ClassLogger instance (defaults to the library logger)
            countdown_from: First tick value
            tick_interval_s: Blocking wait between ticks
            on_tick: Observer called with each tick value
            sleep: Blocking wait function
        """
        if countdown_from < 1:
            raise ValueError(f"countdown_from must be >= 1, got {countdown_from}")
        if tick_interval_s < 0:
            raise ValueError(f"tick_interval_s must be >= 0, got {tick_interval_s}")
        self._source = source
        self._shutdown_action = shutdown_action
        self._reboot_action = reboot_action
        self._logger = logger or get_default_logger("HoldStateMachine")
        self._countdown_from = countdown_from
        self._tick_interval_s = tick_interval_s
        self._on_tick = on_tick
        self._sleep = sleep
        self.phase = CountdownPhase.IDLE

    def check(self) -> bool:
        """
        Run one hold check.

        Returns:
            False when the button is not pressed. On the pressed path the
            action normally ends the process; True is returned only if it
            comes back.

        Raises:
            ButtonError: A pressed-state sample failed; no action is taken
        """
        self.phase = CountdownPhase.IDLE
        if not self._source.is_pressed():
            return False

        self.phase = CountdownPhase.COUNTING
        self._logger.warning("System is resetting ... !")
        self._sleep(self._tick_interval_s)
        for tick in range(self._countdown_from, 0, -1):
            self._logger.info(f"{tick} Sec")
            if self._on_tick is not None:
                self._on_tick(tick)
            self._sleep(self._tick_interval_s)

        try:
            held = self._source.is_pressed()
        except ButtonError:
            self.phase = CountdownPhase.IDLE
            raise

        if held:
            self.phase = CountdownPhase.SHUTDOWN
            self._logger.warning("System is shutting down ... !")
            self._shutdown_action()
        else:
            self.phase = CountdownPhase.REBOOT
            self._logger.warning("System is rebooting ... !")
            self._reboot_action()

        self._logger.warning(f"{self.phase.value} action returned; the process was expected to end")
        return True
