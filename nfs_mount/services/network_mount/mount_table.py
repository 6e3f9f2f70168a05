"""Mount Table - reads the live mount table from the `mount` command."""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from ..command_runner import CommandRunner

# macOS/BSD: "server:/export on /Users/me/External/nas (nfs, nodev, nosuid, mounted by me)"
# Linux:     "server:/export on /home/me/External/nas type nfs4 (rw,relatime,vers=4.2)"
_LINUX_LINE = re.compile(r"^(?P<source>.+?) on (?P<target>.+) type (?P<fstype>\S+) \(.*\)$")
_BSD_LINE = re.compile(r"^(?P<source>.+?) on (?P<target>.+) \((?P<fstype>[^,)]+)[^)]*\)$")


@dataclass(frozen=True)
class MountEntry:
    source: str
    target: str
    fstype: str

    @property
    def is_nfs(self) -> bool:
        return self.fstype.startswith("nfs")


def parse_mount_output(output: str) -> List[MountEntry]:
    """Parse `mount` output into entries, skipping lines that do not look like mounts."""
    entries = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        match = _LINUX_LINE.match(line) or _BSD_LINE.match(line)
        if match:
            entries.append(
                MountEntry(
                    source=match.group("source"),
                    target=match.group("target"),
                    fstype=match.group("fstype").strip(),
                )
            )
    return entries


class MountTable:
    """Queries the live mount table. Nothing is cached: every call re-runs `mount`."""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    async def entries(self) -> List[MountEntry]:
        result = await self._runner.run(["mount"])
        if not result.ok:
            logging.warning(f"Could not read mount table: {result.output or 'unknown error'}")
            return []
        return parse_mount_output(result.stdout)

    async def find(self, path: Union[str, Path]) -> Optional[MountEntry]:
        wanted = os.path.normpath(str(path))
        for entry in await self.entries():
            if os.path.normpath(entry.target) == wanted:
                return entry
        return None

    async def is_mounted(self, path: Union[str, Path]) -> bool:
        return await self.find(path) is not None

    async def is_nfs_mounted(self, path: Union[str, Path]) -> bool:
        entry = await self.find(path)
        return entry is not None and entry.is_nfs
