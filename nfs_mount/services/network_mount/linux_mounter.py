"""Linux Network Mounter."""

from ...models import MountSettings, MountSpec
from .base_mounter import BaseMounter


class LinuxMounter(BaseMounter):
    """
    Linux-specific NFS mount options.

    Linux uses a reserved source port by default, so the resvport setting
    only shows up in the option string when it is turned off.
    """

    def build_mount_options(self, spec: MountSpec, settings: MountSettings) -> str:
        options = [f"vers={spec.nfs_version.value}"]
        if not spec.resolved_resvport(settings):
            options.append("noresvport")
        extra = settings.extra_opts_for(spec.nfs_version)
        if extra:
            options.append(extra)
        options.append("rw")
        return ",".join(options)

    def get_platform_name(self) -> str:
        return "Linux"
