import logging
from functools import lru_cache
from typing import Any, Dict

from .config import Settings
from .models import MountSettings
from .services.command_runner import CommandRunner, SubprocessCommandRunner
from .services.config_loader import ConfigLoader
from .services.fstab_editor import FstabEditor
from .services.network_mount import (
    BaseMounter,
    MountExecutor,
    MountTable,
    PlatformFactory,
    UnmountExecutor,
)
from .services.privilege_checker import PrivilegeChecker

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    """Get the Settings singleton instance."""
    return Settings()


def get_command_runner() -> CommandRunner:
    if "command_runner" not in _singletons:
        _singletons["command_runner"] = SubprocessCommandRunner(
            timeout_seconds=get_settings().command_timeout_seconds
        )
    return _singletons["command_runner"]


def get_mounter() -> BaseMounter:
    if "mounter" not in _singletons:
        mounter = PlatformFactory().create_mounter()
        logging.debug(f"Using {mounter.get_platform_name()} mount options")
        _singletons["mounter"] = mounter
    return _singletons["mounter"]


def get_mount_table() -> MountTable:
    if "mount_table" not in _singletons:
        _singletons["mount_table"] = MountTable(get_command_runner())
    return _singletons["mount_table"]


def get_privilege_checker() -> PrivilegeChecker:
    if "privilege_checker" not in _singletons:
        _singletons["privilege_checker"] = PrivilegeChecker(get_command_runner())
    return _singletons["privilege_checker"]


def get_config_loader(settings: Settings) -> ConfigLoader:
    return ConfigLoader(settings.config_file)


# The services below depend on the loaded mount document, so they are built per run.

def get_unmount_executor(mount_settings: MountSettings) -> UnmountExecutor:
    return UnmountExecutor(
        runner=get_command_runner(),
        mounter=get_mounter(),
        mount_table=get_mount_table(),
        settings=mount_settings,
    )


def get_mount_executor(mount_settings: MountSettings) -> MountExecutor:
    return MountExecutor(
        runner=get_command_runner(),
        mounter=get_mounter(),
        mount_table=get_mount_table(),
        unmount_executor=get_unmount_executor(mount_settings),
        settings=mount_settings,
    )


def get_fstab_editor(settings: Settings, mount_settings: MountSettings) -> FstabEditor:
    return FstabEditor(
        runner=get_command_runner(),
        settings=mount_settings,
        fstab_path=settings.fstab_path,
    )


def reset_singletons() -> None:
    """Reset all singletons (used by tests)."""
    _singletons.clear()
    get_settings.cache_clear()
