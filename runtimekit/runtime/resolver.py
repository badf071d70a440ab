"""
Runtime version resolution.

Sources are consulted in a fixed order and the first one that yields a
version wins:

1. the explicit override (``RUNTIMEKIT_RUNTIME_VERSION``),
2. the version declared in the project manifest,
3. the latest stable release from the release catalog.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from runtimekit.core import env
from runtimekit.core.exceptions import CatalogError, VersionResolutionError
from runtimekit.core.network import NetworkPolicy
from runtimekit.runtime.catalog import ReleaseCatalogClient
from runtimekit.runtime.manifest import ManifestReader

logger = logging.getLogger(__name__)

RUNTIME_VERSION_ENV_VAR = env.RUNTIME_VERSION


class VersionSource(Enum):
    """Where a resolved version came from."""

    OVERRIDE = "override"
    MANIFEST = "manifest"
    LATEST = "latest"


@dataclass(frozen=True)
class ResolvedVersion:
    """A runtime version and the source that produced it."""

    version: str
    source: VersionSource

    def __str__(self) -> str:
        return self.version


class VersionResolver:
    """
    Picks the runtime version for a build.

    Example:
        >>> resolver = VersionResolver(
        ...     catalog=ReleaseCatalogClient(go, HttpClient()),
        ...     policy=NetworkPolicy.DEFAULT,
        ...     project_root=Path("."),
        ...     manifest_reader=go_mod_version,
        ...     manifest_name="go.mod",
        ... )
        >>> resolver.resolve()
        ResolvedVersion(version='1.22.0', source=<VersionSource.LATEST: 'latest'>)
    """

    def __init__(
        self,
        catalog: ReleaseCatalogClient,
        policy: NetworkPolicy,
        project_root: Path,
        manifest_reader: ManifestReader,
        manifest_name: Optional[str] = None,
        override: Optional[str] = None,
    ):
        """
        Initialize resolver.

        Args:
            catalog: Client used when no higher-precedence source is set
            policy: Network policy for the catalog lookup
            project_root: Directory handed to the manifest reader
            manifest_reader: Returns the declared version or ""
            manifest_name: Manifest file name, for log messages
            override: Explicit version; used verbatim when non-empty
        """
        self.catalog = catalog
        self.policy = policy
        self.project_root = Path(project_root)
        self.manifest_reader = manifest_reader
        self.manifest_name = manifest_name or "manifest"
        self.override = override

    def resolve(self) -> ResolvedVersion:
        """
        Resolve the runtime version.

        Raises:
            VersionResolutionError: If the catalog had to be consulted and failed
        """
        if self.override:
            logger.info(
                f"Using runtime version from {RUNTIME_VERSION_ENV_VAR}: {self.override}"
            )
            return ResolvedVersion(self.override, VersionSource.OVERRIDE)

        version = self.manifest_reader(self.project_root)
        if version:
            logger.info(f"Using runtime version from {self.manifest_name}: {version}")
            return ResolvedVersion(version, VersionSource.MANIFEST)

        try:
            version = self.catalog.fetch_latest_stable(self.policy)
        except CatalogError as e:
            raise VersionResolutionError(f"getting latest version: {e}") from e

        logger.info(f"Using latest runtime version: {version}")
        return ResolvedVersion(version, VersionSource.LATEST)
