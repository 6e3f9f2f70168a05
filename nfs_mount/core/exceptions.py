# nfs_mount/core/exceptions.py

from typing import List, Optional


class NfsMountError(Exception):
    """Base exception for all nfs-mount failures."""
    pass


class ConfigError(NfsMountError):
    """Raised when the mount configuration is missing, invalid or still holds placeholders."""
    def __init__(self, message: str, errors: Optional[List[str]] = None, hint: Optional[str] = None):
        self.message = message
        self.errors = list(errors or [])
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        lines = [self.message]
        lines.extend(f"  - {error}" for error in self.errors)
        return "\n".join(lines)


class MountError(NfsMountError):
    """Raised when a single mount entry could not be mounted."""
    def __init__(self, mount_name: str, reason: str, attempts: int = 0, last_error: str = ""):
        self.mount_name = mount_name
        self.reason = reason
        self.attempts = attempts
        self.last_error = last_error
        message = f"{mount_name}: {reason}"
        if last_error:
            message += f" ({last_error})"
        super().__init__(message)


class UnmountError(NfsMountError):
    """Raised when a single mount entry could not be unmounted."""
    def __init__(self, mount_name: str, reason: str, last_error: str = ""):
        self.mount_name = mount_name
        self.reason = reason
        self.last_error = last_error
        message = f"{mount_name}: {reason}"
        if last_error:
            message += f" ({last_error})"
        super().__init__(message)


class PrivilegeError(NfsMountError):
    """Raised when passwordless elevated execution is not available."""
    pass


class FstabError(NfsMountError):
    """Raised when the persistent mount file cannot be backed up or rewritten."""
    def __init__(self, message: str, backup_path: Optional[str] = None):
        self.backup_path = backup_path
        if backup_path:
            message += f" (backup left at {backup_path})"
        super().__init__(message)
