from pathlib import Path
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TOOL_NAME = "nfs-mount"


class Settings(BaseSettings):
    # Paths
    config_dir: Path = Path("~/.config") / TOOL_NAME
    config_file: Optional[Path] = None  # Defaults to <config_dir>/config.yaml
    fstab_path: Path = Path("/etc/fstab")

    # Logging
    log_level: str = "INFO"
    log_file_path: Optional[Path] = None  # Defaults to <config_dir>/nfs-mount.log
    log_max_lines: int = 100  # Log is trimmed to this many lines on startup

    # External commands
    command_timeout_seconds: Optional[float] = None  # None = wait for mount/umount forever

    model_config = SettingsConfigDict(env_prefix="NFS_MOUNT_")

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        self.config_dir = self.config_dir.expanduser()
        if self.config_file is None:
            self.config_file = self.config_dir / "config.yaml"
        else:
            self.config_file = self.config_file.expanduser()
        if self.log_file_path is None:
            self.log_file_path = self.config_dir / f"{TOOL_NAME}.log"
        else:
            self.log_file_path = self.log_file_path.expanduser()
        return self

    @property
    def log_directory(self) -> Path:
        """Directory holding the log file."""
        return self.log_file_path.parent
