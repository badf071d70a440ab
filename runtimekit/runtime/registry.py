"""
Runtime definition registry.

Each supported runtime is described by data rather than code: where its
release catalog lives, how archive URLs are built, which prefix the catalog
puts in front of version strings and how a project declares a version. The
built-in definitions ship in ``runtimekit/data/runtimes.json``; a project
config can override any field or add new runtimes.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from runtimekit.core.exceptions import RuntimeNotFoundError, RuntimeRegistryError
from runtimekit.core.network import NetworkPolicy
from runtimekit.core.platform import PlatformInfo

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = (
    "catalog_url",
    "alt_catalog_url",
    "archive_url",
    "alt_archive_url",
)


@dataclass
class RuntimeDefinition:
    """Download and detection metadata for one runtime family."""

    name: str
    """Runtime identifier (e.g., "go")"""

    catalog_url: str
    """Release catalog on the default network"""

    alt_catalog_url: str
    """Release catalog reachable from the alternative network"""

    archive_url: str
    """Archive URL template on the default mirror"""

    alt_archive_url: str
    """Archive URL template on the alternative mirror"""

    display_name: str = ""
    """Human readable name used in log messages"""

    layer_name: str = ""
    """Layer the toolchain is installed into (defaults to name)"""

    version_prefix: str = ""
    """Literal prefix the catalog puts before version numbers"""

    manifest: Optional[str] = None
    """Manifest reader name, or None when the runtime has no manifest"""

    detect_patterns: List[str] = field(default_factory=list)
    """Glob patterns whose presence opts a project in"""

    os_names: Dict[str, str] = field(default_factory=dict)
    """Canonical OS name -> name used in archive URLs"""

    arch_names: Dict[str, str] = field(default_factory=dict)
    """Canonical arch name -> name used in archive URLs"""

    def __post_init__(self):
        """Validate definition after initialization."""
        for name in _REQUIRED_FIELDS:
            if not getattr(self, name):
                raise RuntimeRegistryError(
                    f"Runtime {self.name!r}: '{name}' cannot be empty"
                )
        for name in ("archive_url", "alt_archive_url"):
            if "{version}" not in getattr(self, name):
                raise RuntimeRegistryError(
                    f"Runtime {self.name!r}: '{name}' must contain a {{version}} placeholder"
                )
        if not self.display_name:
            self.display_name = self.name.capitalize()
        if not self.layer_name:
            self.layer_name = self.name

    def catalog_url_for(self, policy: NetworkPolicy) -> str:
        """Catalog endpoint for the given network policy."""
        if policy is NetworkPolicy.ALTERNATIVE:
            return self.alt_catalog_url
        return self.catalog_url

    def archive_urls(
        self, version: str, policy: NetworkPolicy, platform: PlatformInfo
    ) -> Tuple[str, str]:
        """
        Build the (primary, alternate) archive URLs for a version.

        The mirror matching the network policy is tried first; the other one
        is the fallback.

        Example:
            >>> go = RuntimeRegistry().get("go")
            >>> go.archive_urls("1.20.5", NetworkPolicy.DEFAULT, PlatformInfo("linux", "x64"))
            ('https://dl.google.com/go/go1.20.5.linux-amd64.tar.gz',
             'https://golang.google.cn/dl/go1.20.5.linux-amd64.tar.gz')
        """
        target = platform.for_runtime(self.os_names, self.arch_names)
        values = {"version": version, "os": target.os, "arch": target.arch}
        default_url = self.archive_url.format(**values)
        alt_url = self.alt_archive_url.format(**values)

        if policy is NetworkPolicy.ALTERNATIVE:
            return alt_url, default_url
        return default_url, alt_url


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


class RuntimeRegistry:
    """
    Registry of runtime definitions.

    Example:
        >>> registry = RuntimeRegistry()
        >>> registry.get("go").catalog_url
        'https://golang.org/dl/?mode=json'
    """

    def __init__(
        self,
        metadata_path: Optional[Path] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        """
        Initialize runtime registry.

        Args:
            metadata_path: Optional path to definitions JSON.
                          If None, uses embedded runtimes.json
            overrides: Per-runtime field overrides, typically from the
                       project config's ``runtimes:`` section

        Raises:
            RuntimeRegistryError: If definitions cannot be loaded or are invalid
        """
        self.metadata_path = metadata_path or self._get_default_metadata_path()
        data = self._load_metadata()
        self._raw = _deep_merge(data["runtimes"], overrides or {})
        self._definitions: Dict[str, RuntimeDefinition] = {}
        logger.debug(f"Loaded registry with {len(self._raw)} runtimes")

    def _get_default_metadata_path(self) -> Path:
        """Get path to default embedded definitions file."""
        return Path(__file__).parent.parent / "data" / "runtimes.json"

    def _load_metadata(self) -> Dict[str, Any]:
        if not self.metadata_path.exists():
            raise RuntimeRegistryError(
                f"Runtime definitions not found: {self.metadata_path}"
            )

        try:
            with open(self.metadata_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise RuntimeRegistryError(
                f"Invalid JSON in runtime definitions: {e}\n"
                f"File: {self.metadata_path}"
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("runtimes"), dict):
            raise RuntimeRegistryError(
                f"Invalid definitions structure: missing 'runtimes' key\n"
                f"File: {self.metadata_path}"
            )

        return data

    def list_runtimes(self) -> List[str]:
        """Names of all known runtimes, sorted."""
        return sorted(self._raw)

    def get(self, name: str) -> RuntimeDefinition:
        """
        Look up a runtime definition.

        Raises:
            RuntimeNotFoundError: If the runtime is unknown
            RuntimeRegistryError: If its definition is incomplete
        """
        if name in self._definitions:
            return self._definitions[name]

        raw = self._raw.get(name)
        if raw is None:
            raise RuntimeNotFoundError(name)
        if not isinstance(raw, dict):
            raise RuntimeRegistryError(f"Runtime {name!r}: definition must be a mapping")

        known = RuntimeDefinition.__dataclass_fields__
        unknown = sorted(set(raw) - set(known))
        if unknown:
            raise RuntimeRegistryError(
                f"Runtime {name!r}: unknown fields: {', '.join(unknown)}"
            )
        missing = [f for f in _REQUIRED_FIELDS if f not in raw]
        if missing:
            raise RuntimeRegistryError(
                f"Runtime {name!r}: missing fields: {', '.join(missing)}"
            )

        definition = RuntimeDefinition(**{**raw, "name": name})
        self._definitions[name] = definition
        return definition
