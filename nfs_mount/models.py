import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

MOUNT_NAME_PATTERN = r"^[A-Za-z0-9_-]+$"

DEFAULT_BASE_MOUNT_DIR = "${HOME}/External"


class NfsVersion(str, Enum):
    """NFS protocol versions supported for mounting"""

    V3 = "3"
    V4 = "4"


class MountOptions(BaseModel):
    """Extra mount options from the `settings.mount_options` block."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    use_resvport: bool = Field(
        default=True, description="Use a reserved source port unless a mount overrides it"
    )
    nfsv3_extra_opts: str = Field(default="", description="Appended to NFSv3 option strings")
    nfsv4_extra_opts: str = Field(default="", description="Appended to NFSv4 option strings")

    @field_validator("nfsv3_extra_opts", "nfsv4_extra_opts", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return "" if value is None else value


class MountSettings(BaseModel):
    """
    Process-wide settings from the `settings` block of the mount document.

    Loaded once per run and read-only afterwards. Every field falls back to
    its default when absent from the document.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    base_mount_dir: Path = Field(
        default=Path(DEFAULT_BASE_MOUNT_DIR),
        validate_default=True,
        description="Directory under which every mount point is created",
    )
    max_retries: int = Field(
        default=3, ge=0, description="Extra mount attempts after the first one fails"
    )
    retry_delay: int = Field(
        default=2, ge=0, description="Seconds to wait between mount attempts"
    )
    mount_options: MountOptions = Field(default_factory=MountOptions)

    @field_validator("base_mount_dir", mode="before")
    @classmethod
    def _expand_home(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            value = DEFAULT_BASE_MOUNT_DIR
        return Path(os.path.expanduser(os.path.expandvars(str(value))))

    @field_validator("mount_options", mode="before")
    @classmethod
    def _none_is_default(cls, value):
        return {} if value is None else value

    def mount_point_for(self, mount_name: str) -> Path:
        """Derive the local mount point for a mount name."""
        return self.base_mount_dir / mount_name

    def extra_opts_for(self, nfs_version: NfsVersion) -> str:
        if nfs_version == NfsVersion.V4:
            return self.mount_options.nfsv4_extra_opts.strip()
        return self.mount_options.nfsv3_extra_opts.strip()


class MountSpec(BaseModel):
    """
    One entry of the `mounts` list: a remote export and where it goes locally.

    Identity is `mount_name`, which doubles as the directory name under
    `MountSettings.base_mount_dir`.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    server: str = Field(..., description="NFS server host name or IP address")
    share: str = Field(..., description="Absolute export path on the server")
    nfs_version: NfsVersion = Field(..., description="NFS protocol version")
    mount_name: str = Field(..., description="Local directory name for the mount")
    enabled: bool = Field(default=True, description="Disabled mounts are skipped")
    use_resvport: Optional[bool] = Field(
        default=None, description="Per-mount override of settings.mount_options.use_resvport"
    )

    @field_validator("server", "share", "mount_name", mode="before")
    @classmethod
    def _blank_is_missing(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise PydanticCustomError("missing", "Field required")
        return value

    @field_validator("nfs_version", mode="before")
    @classmethod
    def _check_version(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise PydanticCustomError("missing", "Field required")
        value = str(value).strip()
        if value not in (NfsVersion.V3.value, NfsVersion.V4.value):
            raise PydanticCustomError(
                "nfs_version", "nfs_version must be '3' or '4', got: {value}", {"value": value}
            )
        return value

    @field_validator("mount_name")
    @classmethod
    def _check_mount_name(cls, value: str) -> str:
        if not re.match(MOUNT_NAME_PATTERN, value):
            raise PydanticCustomError(
                "mount_name",
                "mount_name contains invalid characters: {value} "
                "(only letters, numbers, hyphens and underscores are allowed)",
                {"value": value},
            )
        return value

    @field_validator("enabled", mode="before")
    @classmethod
    def _none_is_enabled(cls, value):
        return True if value is None else value

    @property
    def nfs_url(self) -> str:
        return f"{self.server}:{self.share}"

    def resolved_resvport(self, settings: MountSettings) -> bool:
        """Per-mount resvport override, or the global default."""
        if self.use_resvport is not None:
            return self.use_resvport
        return settings.mount_options.use_resvport


class MountConfig(BaseModel):
    """The validated mount document."""

    model_config = ConfigDict(frozen=True)

    settings: MountSettings = Field(default_factory=MountSettings)
    mounts: List[MountSpec]

    @property
    def enabled_mounts(self) -> List[MountSpec]:
        return [spec for spec in self.mounts if spec.enabled]


@dataclass
class BatchResult:
    """
    Aggregated outcome of a mount or unmount batch.

    One failed entry never aborts the batch; the failure count drives the
    process exit code.
    """

    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[Exception] = field(default_factory=list)

    def record_success(self) -> None:
        self.succeeded += 1

    def record_skip(self) -> None:
        self.skipped += 1

    def record_failure(self, error: Exception) -> None:
        self.failed += 1
        self.errors.append(error)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def __str__(self) -> str:
        return (
            f"BatchResult(succeeded={self.succeeded}, "
            f"skipped={self.skipped}, failed={self.failed})"
        )


@dataclass
class FstabChange:
    """Result of an fstab edit."""

    fstab_path: Path
    backup_path: Optional[Path] = None
    lines_added: int = 0
    lines_removed: int = 0
