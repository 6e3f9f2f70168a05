"""macOS Network Mounter."""

from ...models import MountSettings, MountSpec
from .base_mounter import BaseMounter

# Prevent AppleDouble (._*) files on the share and hide the mount from Finder's sidebar
MACOS_TRAILING_OPTIONS = ("rw", "noappledouble", "nobrowse")


class MacOSMounter(BaseMounter):
    """macOS-specific NFS mount options."""

    def build_mount_options(self, spec: MountSpec, settings: MountSettings) -> str:
        """vers=<v>[,resvport][,<extra opts>],rw,noappledouble,nobrowse"""
        options = [f"vers={spec.nfs_version.value}"]
        if spec.resolved_resvport(settings):
            options.append("resvport")
        extra = settings.extra_opts_for(spec.nfs_version)
        if extra:
            options.append(extra)
        options.extend(MACOS_TRAILING_OPTIONS)
        return ",".join(options)

    def get_platform_name(self) -> str:
        """Get platform name for logging."""
        return "macOS"
