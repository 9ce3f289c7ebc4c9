"""Host platform description passed to every provisioning component."""

from __future__ import annotations

import platform as _platform
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

from constants import ArchFallback

# platform.machine() values mapped to manifest architecture names
_MACHINE_ARCHES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "aarch64": "aarch64",
    "arm64": "arm64",
    "s390x": "s390x",
}


@dataclass(frozen=True)
class HostPlatform:
    """Facts about the machine PyPy is installed on.

    Attributes:
        name: ``sys.platform`` style name (``linux``, ``darwin``, ``win32``).
        manifest_platforms: Platform names accepted in manifest assets.
        single_architecture: The only architecture the platform ships, if any.
    """

    name: str
    manifest_platforms: Tuple[str, ...]
    single_architecture: Optional[str] = None

    @property
    def is_windows(self) -> bool:
        return self.name == "win32"

    def supports(self, asset_platform: str) -> bool:
        """Return True when a manifest asset built for ``asset_platform`` runs here."""
        return asset_platform in self.manifest_platforms

    def fallback_architecture(
        self,
        architecture: str,
        policy: ArchFallback,
        explicit: bool,
    ) -> Optional[str]:
        """Architecture to retry a cache miss with, or None.

        Only platforms shipping a single architecture have a fallback.
        """
        if policy is ArchFallback.NEVER or not self.single_architecture:
            return None
        if policy is ArchFallback.IMPLICIT and explicit:
            return None
        if architecture == self.single_architecture:
            return None
        return self.single_architecture


LINUX = HostPlatform(name="linux", manifest_platforms=("linux",))
MACOS = HostPlatform(name="darwin", manifest_platforms=("darwin",))
# PyPy historically only precompiles x86 binaries for Windows.
WINDOWS = HostPlatform(name="win32", manifest_platforms=("win32", "win64"), single_architecture="x86")


def detect_host_platform(sys_platform: Optional[str] = None) -> HostPlatform:
    """Build the HostPlatform for ``sys_platform`` (defaults to the running host)."""
    name = sys_platform or sys.platform
    if name.startswith("win"):
        return WINDOWS
    if name == "darwin":
        return MACOS
    if name.startswith("linux"):
        return LINUX
    return HostPlatform(name=name, manifest_platforms=(name,))


def default_architecture(machine: Optional[str] = None) -> str:
    """Map ``platform.machine()`` to the manifest's architecture naming."""
    raw = (machine if machine is not None else _platform.machine()).lower()
    return _MACHINE_ARCHES.get(raw, raw or "x64")
