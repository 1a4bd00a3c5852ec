"""
Shutdown and reboot commands for the hold-to-reset button
"""

import subprocess
from typing import Callable, List, Optional, Sequence

from .errors import ActionError
from .hybrid_logger import get_default_logger

SHUTDOWN_COMMAND = ["sudo", "/sbin/shutdown", "-h", "now"]
REBOOT_COMMAND = ["sudo", "/sbin/reboot"]
SYNC_COMMAND = ["sync"]


class SystemPowerActions:
    """
    Runs the OS power commands.

    Example:
        actions = SystemPowerActions(logger)
        hold = HoldStateMachine(button, actions.shutdown, actions.reboot, logger)
    """

    def __init__(self,
                 logger=None,
                 shutdown_command: Sequence[str] = SHUTDOWN_COMMAND,
                 reboot_command: Sequence[str] = REBOOT_COMMAND,
                 sync_first: bool = True,
                 run: Optional[Callable] = None):
        """
        Args:
            logger: ClassLogger instance (defaults to the library logger)
            shutdown_command: argv for halting the system
            reboot_command: argv for rebooting the system
            sync_first: Flush filesystems before either command
            run: Replacement for ``subprocess.run``
        """
        self._logger = logger or get_default_logger("SystemPowerActions")
        self.shutdown_command: List[str] = list(shutdown_command)
        self.reboot_command: List[str] = list(reboot_command)
        self.sync_first = sync_first
        self._run = run or subprocess.run

    def _execute(self, command: List[str]) -> None:
        try:
            if self.sync_first:
                self._run(SYNC_COMMAND, check=True)
            self._run(command, check=True)
        except (subprocess.CalledProcessError, OSError) as e:
            self._logger.error(f"Command {' '.join(command)} failed", e)
            raise ActionError(f"Command {' '.join(command)} failed: {e}") from e

    def shutdown(self) -> None:
        self._logger.info("Initiating system shutdown...")
        self._execute(self.shutdown_command)

    def reboot(self) -> None:
        self._logger.info("Initiating system reboot...")
        self._execute(self.reboot_command)
