"""
Network Mount Module

Components:
- MountExecutor: mounts configured NFS shares with bounded retries
- UnmountExecutor: unmounts them again, escalating to sudo and force
- MountTable: reads the live mount table from `mount`
- BaseMounter: abstract base class for platform-specific mount commands
- MacOSMounter / LinuxMounter: platform option strings
- PlatformFactory: platform detection and mounter factory

Every external command goes through a CommandRunner so tests can replace it.
"""

from .base_mounter import BaseMounter
from .mount_executor import MountExecutor
from .mount_table import MountEntry, MountTable, parse_mount_output
from .platform_factory import PlatformFactory, UnsupportedPlatformError
from .unmount_executor import UnmountExecutor

__all__ = [
    "BaseMounter",
    "MountEntry",
    "MountExecutor",
    "MountTable",
    "PlatformFactory",
    "UnmountExecutor",
    "UnsupportedPlatformError",
    "parse_mount_output",
]
