"""
Fstab Editor - adds and removes boot-time NFS entries in the persistent mount file.

Every edit is preceded by a timestamped backup copy next to the file, and
the new content replaces the old one through a rename so a crash never
leaves a half-written file behind. There is no automatic restore: when a
write fails the backup stays where it is and its path is reported.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import aiofiles
import aiofiles.os
import aiofiles.tempfile

from ..core.exceptions import FstabError
from ..logging_config import log_success
from ..models import FstabChange, MountSettings, MountSpec, NfsVersion
from .command_runner import CommandRunner, elevate

FSTAB_MARKER = "# NFS mounts added by nfs-mount"

FSTAB_BASE_OPTIONS = ("rw", "bg", "hard", "intr")


class FstabEditor:
    def __init__(
        self,
        runner: CommandRunner,
        settings: MountSettings,
        fstab_path: Path = Path("/etc/fstab"),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._runner = runner
        self._settings = settings
        self.fstab_path = Path(fstab_path)
        self._clock = clock

    def backup_path_for(self, timestamp: datetime) -> Path:
        """<fstab>.backup.YYYYmmdd_HHMMSS, with a counter suffix if that name is taken."""
        backup_path = self.fstab_path.with_name(
            f"{self.fstab_path.name}.backup.{timestamp.strftime('%Y%m%d_%H%M%S')}"
        )
        candidate, counter = backup_path, 1
        while candidate.exists():
            candidate = backup_path.with_name(f"{backup_path.name}.{counter}")
            counter += 1
        return candidate

    def build_entry(self, spec: MountSpec) -> str:
        """server:share <mount point> nfs vers=N[,resvport],rw,bg,hard,intr[,tcp] 0 0"""
        options = [f"vers={spec.nfs_version.value}"]
        if spec.resolved_resvport(self._settings):
            options.append("resvport")
        options.extend(FSTAB_BASE_OPTIONS)
        if spec.nfs_version == NfsVersion.V3:
            options.append("tcp")
        mount_point = self._settings.mount_point_for(spec.mount_name)
        return f"{spec.nfs_url} {mount_point} nfs {','.join(options)} 0 0"

    def _can_write_directly(self) -> bool:
        directory_ok = os.access(self.fstab_path.parent, os.W_OK)
        file_ok = not self.fstab_path.exists() or os.access(self.fstab_path, os.W_OK)
        return directory_ok and file_ok

    async def _read(self) -> str:
        if not await aiofiles.os.path.exists(self.fstab_path):
            return ""
        try:
            async with aiofiles.open(self.fstab_path, "r", encoding="utf-8") as f:
                return await f.read()
        except OSError as e:
            raise FstabError(f"Cannot read {self.fstab_path}: {e}") from e

    async def backup(self, timestamp: Optional[datetime] = None) -> Optional[Path]:
        """Copy the file to a timestamped sibling. Returns None if there is nothing to back up."""
        if not await aiofiles.os.path.exists(self.fstab_path):
            return None

        backup_path = self.backup_path_for(timestamp or self._clock())
        logging.info(f"Backing up {self.fstab_path} to {backup_path}")

        if self._can_write_directly():
            try:
                content = await self._read()
                async with aiofiles.open(backup_path, "w", encoding="utf-8") as f:
                    await f.write(content)
            except OSError as e:
                raise FstabError(f"Cannot back up {self.fstab_path}: {e}") from e
        else:
            result = await self._runner.run(elevate(["cp", str(self.fstab_path), str(backup_path)]))
            if not result.ok:
                raise FstabError(f"Cannot back up {self.fstab_path}: {result.output}")

        log_success("Backup created")
        return backup_path

    async def _write(self, content: str, backup_path: Optional[Path]) -> None:
        """Replace the file content through a temp sibling and a rename."""
        staging = self.fstab_path.with_name(f".{self.fstab_path.name}.nfs-mount.tmp")
        backup = str(backup_path) if backup_path else None

        if self._can_write_directly():
            try:
                async with aiofiles.open(staging, "w", encoding="utf-8") as f:
                    await f.write(content)
                await aiofiles.os.replace(staging, self.fstab_path)
            except OSError as e:
                raise FstabError(f"Cannot write {self.fstab_path}: {e}", backup_path=backup) from e
            return

        async with aiofiles.tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", prefix="nfs-mount-fstab-", delete=False
        ) as f:
            await f.write(content)
            local_tmp = f.name
        try:
            for args in (
                ["cp", local_tmp, str(staging)],
                ["mv", str(staging), str(self.fstab_path)],
            ):
                result = await self._runner.run(elevate(args))
                if not result.ok:
                    raise FstabError(
                        f"Cannot write {self.fstab_path}: {result.output}", backup_path=backup
                    )
        finally:
            await aiofiles.os.remove(local_tmp)

    async def setup_automount(self, specs: Iterable[MountSpec]) -> FstabChange:
        """Append one boot-mount line per enabled spec after the existing content."""
        enabled = [spec for spec in specs if spec.enabled]
        change = FstabChange(fstab_path=self.fstab_path)
        if not enabled:
            logging.warning("No enabled mounts in configuration, nothing to add")
            return change

        if not self._can_write_directly():
            logging.warning(f"This requires sudo privileges to modify {self.fstab_path}")

        now = self._clock()
        change.backup_path = await self.backup(now)

        logging.info("Generating fstab entries...")
        entries: List[str] = []
        for spec in enabled:
            mount_point = self._settings.mount_point_for(spec.mount_name)
            try:
                await aiofiles.os.makedirs(mount_point, exist_ok=True)
            except OSError as e:
                raise FstabError(
                    f"Cannot create mount point {mount_point}: {e}",
                    backup_path=str(change.backup_path) if change.backup_path else None,
                ) from e
            entries.append(self.build_entry(spec))
            logging.info(f"Entry for: {spec.mount_name}")

        existing = await self._read()
        if existing and not existing.endswith("\n"):
            existing += "\n"
        marker = f"{FSTAB_MARKER} on {now.strftime('%a %b %d %H:%M:%S %Y')}"
        new_content = existing + "\n".join([marker, *entries]) + "\n"

        logging.info(f"Adding entries to {self.fstab_path}...")
        await self._write(new_content, change.backup_path)

        change.lines_added = len(entries)
        log_success("Auto-mount configuration complete!")
        logging.info("Mounts will be available after the next reboot")
        return change

    async def remove_automount(self, specs: Iterable[MountSpec]) -> FstabChange:
        """Drop every line mentioning a configured mount point, enabled or not."""
        change = FstabChange(fstab_path=self.fstab_path)
        if not await aiofiles.os.path.exists(self.fstab_path):
            logging.info(f"No {self.fstab_path} file found. Nothing to remove.")
            return change

        if not self._can_write_directly():
            logging.warning(f"This requires sudo privileges to modify {self.fstab_path}")

        change.backup_path = await self.backup()

        mount_points = [str(self._settings.mount_point_for(spec.mount_name)) for spec in specs]
        kept: List[str] = []
        for line in (await self._read()).splitlines(keepends=True):
            if any(mount_point in line for mount_point in mount_points):
                change.lines_removed += 1
            elif line.startswith(FSTAB_MARKER):
                continue
            else:
                kept.append(line)

        await self._write("".join(kept), change.backup_path)

        log_success(f"Removed {change.lines_removed} auto-mount entries")
        logging.info("Changes will take effect after reboot")
        return change
