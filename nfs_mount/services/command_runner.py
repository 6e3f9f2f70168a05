"""Command Runner - the single seam through which external tools are executed."""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

SUDO_PREFIX = ("sudo", "-n")

COMMAND_NOT_FOUND = 127
COMMAND_TIMED_OUT = 124


@dataclass
class CommandResult:
    """Exit status and captured output of one external command."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined output, stderr first since that is where mount reports errors."""
        return "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)


def needs_elevation() -> bool:
    """True unless already running as root."""
    return hasattr(os, "geteuid") and os.geteuid() != 0


def elevate(args: Sequence[str]) -> List[str]:
    """Prefix a command with non-interactive sudo."""
    return [*SUDO_PREFIX, *args]


class CommandRunner(ABC):
    """Runs an external command: args in, exit status and output out."""

    @abstractmethod
    async def run(self, args: Sequence[str]) -> CommandResult:
        pass


class SubprocessCommandRunner(CommandRunner):
    """Runs commands with asyncio subprocesses."""

    def __init__(self, timeout_seconds: Optional[float] = None):
        self._timeout = timeout_seconds

    async def run(self, args: Sequence[str]) -> CommandResult:
        args = list(args)
        logging.debug(f"Running: {' '.join(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *args, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
            )
        except FileNotFoundError:
            return CommandResult(args, COMMAND_NOT_FOUND, stderr=f"{args[0]}: command not found")

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logging.error(f"Command timed out after {self._timeout}s: {' '.join(args)}")
            process.kill()
            await process.wait()
            return CommandResult(args, COMMAND_TIMED_OUT, stderr="command timed out")

        return CommandResult(
            args,
            process.returncode,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=stderr.decode(errors="replace") if stderr else "",
        )
