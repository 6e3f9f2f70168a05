"""Abstract Base Mounter - platform-specific mount command construction."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ...models import MountSettings, MountSpec


class BaseMounter(ABC):
    """Abstract base class for platform-specific mount commands."""

    @abstractmethod
    def build_mount_options(self, spec: MountSpec, settings: MountSettings) -> str:
        """Build the `-o` option string for a mount."""
        pass

    @abstractmethod
    def get_platform_name(self) -> str:
        """Get platform name for logging."""
        pass

    def mount_command(self, spec: MountSpec, mount_point: Path, options: str) -> List[str]:
        return ["mount", "-t", "nfs", "-o", options, spec.nfs_url, str(mount_point)]

    def unmount_command(self, mount_point: Path, force: bool = False) -> List[str]:
        if force:
            return ["umount", "-f", str(mount_point)]
        return ["umount", str(mount_point)]
