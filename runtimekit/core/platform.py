"""
Platform detection for RuntimeKit.

Archive names embed the target OS and CPU architecture. This module detects
both in a canonical form and translates them into a runtime's own naming
(Go publishes ``linux-amd64`` where the canonical string is ``linux-x64``).
"""

import functools
import platform
from dataclasses import dataclass
from typing import Dict, Optional


_ARCH_MAP = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}

_OS_MAP = {
    "linux": "linux",
    "darwin": "macos",
    "windows": "windows",
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Canonical platform information.

    Attributes:
        os: Operating system ('linux', 'macos', 'windows')
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm', ...)
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string.

        Example:
            >>> PlatformInfo("linux", "x64").platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def for_runtime(
        self,
        os_names: Optional[Dict[str, str]] = None,
        arch_names: Optional[Dict[str, str]] = None,
    ) -> "PlatformInfo":
        """
        Translate to a runtime's naming convention.

        Args:
            os_names: Canonical OS -> runtime OS name
            arch_names: Canonical arch -> runtime arch name

        Example:
            >>> PlatformInfo("linux", "x64").for_runtime(arch_names={"x64": "amd64"})
            PlatformInfo(os='linux', arch='amd64')
        """
        os_names = os_names or {}
        arch_names = arch_names or {}
        return PlatformInfo(
            os=os_names.get(self.os, self.os),
            arch=arch_names.get(self.arch, self.arch),
        )

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect the current platform.

    Cached: detection runs once per process.
    """
    system = platform.system().lower()
    machine = platform.machine().lower()
    return PlatformInfo(
        os=_OS_MAP.get(system, system),
        arch=_ARCH_MAP.get(machine, machine),
    )


def clear_platform_cache():
    """Clear the detection cache (for tests)."""
    detect_platform.cache_clear()
