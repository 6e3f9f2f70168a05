"""
Pytest configuration and shared fixtures.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest

from nfs_mount.dependencies import reset_singletons
from nfs_mount.models import MountSettings, MountSpec
from nfs_mount.services.command_runner import CommandResult, CommandRunner


class FakeSystem(CommandRunner):
    """
    Scripted stand-in for mount/umount/sudo.

    Keeps an in-memory mount table and records every command it was asked
    to run. `mount_failures` makes that many mount calls fail before they
    start succeeding; `noop_mounts` makes mount exit 0 without changing the
    table.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.mounted: Dict[str, Tuple[str, str]] = {}
        self.mount_failures = 0
        self.mount_error = "mount_nfs: can't mount /export/x from 10.0.0.5: Connection refused"
        self.noop_mounts = False
        self.sudo_available = True
        self.umount_results: List[bool] = []
        self.umount_noop = False
        self.file_ops_allowed = True

    def mount_line_for(self, target: str) -> str:
        source, fstype = self.mounted[target]
        return f"{source} on {target} ({fstype}, nodev, nosuid, mounted by tester)"

    def add_mount(self, target, source="10.0.0.5:/export/x", fstype="nfs") -> None:
        self.mounted[str(target)] = (source, fstype)

    @property
    def mount_calls(self) -> List[List[str]]:
        return [c for c in self.calls if "mount" in c and c != ["mount"] and "umount" not in c
                and c != ["sudo", "-n", "mount"]]

    @property
    def umount_calls(self) -> List[List[str]]:
        return [c for c in self.calls if "umount" in c]

    async def run(self, args: Sequence[str]) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        command = args
        if command[:2] == ["sudo", "-n"]:
            if not self.sudo_available:
                return CommandResult(args, 1, stderr="sudo: a password is required")
            command = command[2:]

        if command == ["mount"]:
            table = "\n".join(self.mount_line_for(t) for t in self.mounted)
            table = "/dev/disk3s1s1 on / (apfs, sealed, local, read-only, journaled)\n" + table
            return CommandResult(args, 0, stdout=table + "\n")

        if command[0] == "mount":
            if self.mount_failures > 0:
                self.mount_failures -= 1
                return CommandResult(args, 1, stderr=self.mount_error)
            if not self.noop_mounts:
                self.add_mount(command[-1], source=command[-2])
            return CommandResult(args, 0)

        if command[0] == "umount":
            ok = self.umount_results.pop(0) if self.umount_results else True
            if not ok:
                return CommandResult(args, 1, stderr=f"umount: {command[-1]}: Resource busy")
            if not self.umount_noop:
                self.mounted.pop(command[-1], None)
            return CommandResult(args, 0)

        if command[0] in ("cp", "mv"):
            if not self.file_ops_allowed:
                return CommandResult(args, 1, stderr=f"{command[0]}: Permission denied")
            if command[0] == "cp":
                shutil.copyfile(command[1], command[2])
            else:
                shutil.move(command[1], command[2])
            return CommandResult(args, 0)

        return CommandResult(args, 127, stderr=f"{command[0]}: command not found")


class SleepRecorder:
    """Async sleep replacement that records requested delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before each test."""
    reset_singletons()
    yield
    reset_singletons()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces the root handlers; put the originals back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def fake_system():
    return FakeSystem()


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def base_mount_dir(tmp_path) -> Path:
    return tmp_path / "External"


@pytest.fixture
def mount_settings(base_mount_dir) -> MountSettings:
    return MountSettings(base_mount_dir=str(base_mount_dir))


def make_spec(mount_name="nas", **overrides) -> MountSpec:
    data = {
        "server": "10.0.0.5",
        "share": "/export/x",
        "nfs_version": "3",
        "mount_name": mount_name,
        "enabled": True,
    }
    data.update(overrides)
    return MountSpec.model_validate(data)


@pytest.fixture
def spec_factory():
    """Build MountSpecs with sensible defaults for the 10.0.0.5:/export/x share."""
    return make_spec
