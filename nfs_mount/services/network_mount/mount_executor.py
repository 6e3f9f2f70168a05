"""Mount Executor - attaches configured NFS mounts with bounded retries."""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Optional

import aiofiles.os

from ...core.exceptions import MountError, UnmountError
from ...logging_config import log_success
from ...models import BatchResult, MountSettings, MountSpec
from ..command_runner import CommandRunner, elevate, needs_elevation
from .base_mounter import BaseMounter
from .mount_table import MountTable
from .unmount_executor import UnmountExecutor

SleepFunc = Callable[[float], Awaitable[None]]


class MountExecutor:
    """
    Mounts each enabled spec in input order.

    Every attempt runs the unprivileged mount first and falls back to
    `sudo -n` when that fails. A zero exit status only counts once the mount
    table shows an NFS entry at the mount point. A failed entry is recorded
    and the batch moves on to the next one.
    """

    def __init__(
        self,
        runner: CommandRunner,
        mounter: BaseMounter,
        mount_table: MountTable,
        unmount_executor: UnmountExecutor,
        settings: MountSettings,
        sleep: SleepFunc = asyncio.sleep,
        elevated: Optional[bool] = None,
    ):
        self._runner = runner
        self._mounter = mounter
        self._mount_table = mount_table
        self._unmount_executor = unmount_executor
        self._settings = settings
        self._sleep = sleep
        self._elevated = needs_elevation() if elevated is None else elevated

    async def ensure_base_dir(self) -> None:
        base_dir = self._settings.base_mount_dir
        if not await aiofiles.os.path.isdir(base_dir):
            logging.info(f"Creating base directory: {base_dir}")
            await aiofiles.os.makedirs(base_dir, exist_ok=True)
            log_success("Base directory created")

    async def _ensure_mount_point(self, mount_point: Path) -> None:
        if not await aiofiles.os.path.isdir(mount_point):
            await aiofiles.os.makedirs(mount_point, exist_ok=True)
            logging.info(f"Created directory: {mount_point}")

    async def _attempt_mount(self, spec: MountSpec, mount_point: Path, options: str) -> str:
        """One mount attempt. Returns an empty string on success, else the error text."""
        args = self._mounter.mount_command(spec, mount_point, options)
        result = await self._runner.run(args)

        if not result.ok and self._elevated:
            result = await self._runner.run(elevate(args))

        if not result.ok:
            return result.output or f"mount exited with status {result.returncode}"

        if not await self._mount_table.is_nfs_mounted(mount_point):
            return "mount reported success but the mount point is not in the mount table"

        return ""

    async def mount_one(self, spec: MountSpec) -> None:
        """Mount a single enabled spec. Raises MountError when every attempt failed."""
        mount_point = self._settings.mount_point_for(spec.mount_name)
        logging.info(f"Processing: {spec.mount_name}")

        try:
            await self._ensure_mount_point(mount_point)
        except OSError as e:
            logging.error(f"Cannot create mount point for {spec.mount_name}: {e}")
            raise MountError(spec.mount_name, "cannot create mount point", last_error=str(e)) from e

        # Remount to pick up option changes
        if await self._mount_table.is_mounted(mount_point):
            logging.warning(f"Already mounted: {spec.mount_name} (will remount to refresh options)")
            try:
                await self._unmount_executor.unmount_one(spec.mount_name)
            except UnmountError as e:
                logging.error(f"Unable to unmount existing mount: {spec.mount_name}")
                raise MountError(
                    spec.mount_name, "unable to unmount existing mount", last_error=str(e)
                ) from e
            logging.info(f"Remounting {spec.mount_name}...")

        options = self._mounter.build_mount_options(spec, self._settings)
        logging.debug(f"Mount options for {spec.mount_name}: {options}")

        max_attempts = self._settings.max_retries + 1
        last_error = ""
        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                logging.info(f"Retry attempt {attempt - 1} of {self._settings.max_retries}...")
                await self._sleep(self._settings.retry_delay)

            last_error = await self._attempt_mount(spec, mount_point, options)
            if not last_error:
                log_success(f"Mounted: {spec.mount_name} → {mount_point}")
                return
            logging.debug(f"Mount attempt {attempt} failed for {spec.mount_name}: {last_error}")

        logging.error(f"Failed to mount after {max_attempts} attempts: {spec.mount_name}")
        logging.info(f"URL: {spec.nfs_url}")
        logging.info(f"Mount point: {mount_point}")
        logging.error(f"Error: {last_error}")
        raise MountError(
            spec.mount_name, "mount failed", attempts=max_attempts, last_error=last_error
        )

    async def mount_all(self, specs: Iterable[MountSpec]) -> BatchResult:
        """Mount every enabled spec; disabled specs are counted as skipped and never touched."""
        specs = list(specs)
        logging.info(f"Found {len(specs)} mount(s) in configuration")

        result = BatchResult()
        for spec in specs:
            if not spec.enabled:
                logging.info(f"Skipping disabled mount: {spec.mount_name}")
                result.record_skip()
                continue
            try:
                await self.mount_one(spec)
                result.record_success()
            except MountError as e:
                result.record_failure(e)

        log_success(f"Successfully mounted: {result.succeeded}")
        if result.skipped:
            logging.info(f"Skipped (disabled): {result.skipped}")
        if result.failed:
            logging.error(f"Failed to mount: {result.failed}")
        return result
