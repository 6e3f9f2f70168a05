"""Unmount Executor - detaches configured NFS mounts."""

import logging
from typing import Iterable, List, Optional, Tuple

import aiofiles.os

from ...core.exceptions import UnmountError
from ...logging_config import log_success
from ...models import BatchResult, MountSettings, MountSpec
from ..command_runner import CommandResult, CommandRunner, elevate, needs_elevation
from .base_mounter import BaseMounter
from .mount_table import MountTable


class UnmountExecutor:
    """Unmounts mount points under the base mount directory, escalating step by step."""

    def __init__(
        self,
        runner: CommandRunner,
        mounter: BaseMounter,
        mount_table: MountTable,
        settings: MountSettings,
        elevated: Optional[bool] = None,
    ):
        self._runner = runner
        self._mounter = mounter
        self._mount_table = mount_table
        self._settings = settings
        self._elevated = needs_elevation() if elevated is None else elevated

    def _attempts(self, mount_point) -> List[Tuple[List[str], bool]]:
        """Plain umount, then sudo umount, then sudo umount -f. Pairs of (args, forced)."""
        attempts = [(self._mounter.unmount_command(mount_point), False)]
        if self._elevated:
            attempts.append((elevate(self._mounter.unmount_command(mount_point)), False))
            attempts.append((elevate(self._mounter.unmount_command(mount_point, force=True)), True))
        return attempts

    async def unmount_one(self, mount_name: str) -> None:
        """Unmount one mount point. Raises UnmountError on failure."""
        mount_point = self._settings.mount_point_for(mount_name)
        logging.info(f"Processing: {mount_name}")

        if not await aiofiles.os.path.isdir(mount_point):
            logging.info(f"Mount point does not exist: {mount_name}")
            return

        if not await self._mount_table.is_mounted(mount_point):
            logging.info(f"Not mounted: {mount_name}")
            return

        result: Optional[CommandResult] = None
        for args, forced in self._attempts(mount_point):
            if forced:
                logging.info("Attempting force unmount...")
            result = await self._runner.run(args)
            if result.ok:
                break

        if result is None or not result.ok:
            last_error = result.output if result else ""
            logging.error(f"Failed to unmount: {mount_name}")
            logging.info(f"Mount point: {mount_point}")
            if last_error:
                logging.error(f"Error: {last_error}")
            raise UnmountError(mount_name, "unmount failed", last_error=last_error)

        if await self._mount_table.is_mounted(mount_point):
            logging.error(f"Unmount reported success but mount still exists: {mount_name}")
            raise UnmountError(mount_name, "unmount reported success but mount still exists")

        log_success(f"Unmounted: {mount_name} → {mount_point}")

    async def unmount_all(self, specs: Iterable[MountSpec]) -> BatchResult:
        """Unmount every configured spec, enabled or not."""
        specs = list(specs)
        logging.info(f"Found {len(specs)} mount(s) in configuration")

        result = BatchResult()
        for spec in specs:
            try:
                await self.unmount_one(spec.mount_name)
                result.record_success()
            except UnmountError as e:
                result.record_failure(e)

        log_success(f"Successfully processed: {result.succeeded}")
        if result.failed:
            logging.error(f"Failed to unmount: {result.failed}")
        return result
