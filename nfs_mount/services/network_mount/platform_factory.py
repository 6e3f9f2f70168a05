"""Platform Factory - platform detection and mounter creation."""

import logging
import platform

from .base_mounter import BaseMounter


class UnsupportedPlatformError(Exception):
    """Raised when platform is not supported for network mounting."""
    pass


class PlatformFactory:
    """Factory for creating platform-specific mounter implementations."""

    def detect_platform(self) -> str:
        """Detect current platform. Returns: macos or linux."""
        system = platform.system().lower()

        if system == "darwin":
            return "macos"
        elif system == "linux":
            return "linux"
        else:
            raise UnsupportedPlatformError(f"Platform {system} not supported for NFS mounting")

    def create_mounter(self) -> BaseMounter:
        """Create platform-specific mounter instance."""
        platform_name = self.detect_platform()
        logging.debug(f"Detected platform: {platform_name}")

        if platform_name == "macos":
            from .macos_mounter import MacOSMounter
            return MacOSMounter()
        else:
            from .linux_mounter import LinuxMounter
            return LinuxMounter()
