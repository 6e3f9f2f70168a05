"""Privilege Checker - detects whether passwordless sudo is available for mount."""

import logging
from typing import Optional

from ..core.exceptions import PrivilegeError
from .command_runner import CommandRunner, elevate, needs_elevation


class PrivilegeChecker:
    def __init__(self, runner: CommandRunner, elevated: Optional[bool] = None):
        self._runner = runner
        self._elevated = needs_elevation() if elevated is None else elevated

    async def check(self) -> None:
        """Raise PrivilegeError if `sudo -n mount` does not work. No-op when running as root."""
        if not self._elevated:
            logging.debug("Running as root, no sudo needed")
            return

        result = await self._runner.run(elevate(["mount"]))
        if not result.ok:
            raise PrivilegeError(
                "Passwordless sudo is not configured (recommended for automation). "
                "Allow passwordless mount/umount in /etc/sudoers.d/ for reliable unattended runs."
            )
