"""
Runtime provisioning for RuntimeKit.

This package provides:
- Runtime definitions (catalog and archive mirrors per runtime)
- Version resolution (override, manifest, latest stable release)
- Layer cache validation
- Archive installation with mirror fallback
- Detect/build entry points
"""

from runtimekit.runtime.registry import (
    RuntimeDefinition,
    RuntimeRegistry,
)
from runtimekit.runtime.catalog import (
    Release,
    ReleaseCatalogClient,
    latest_stable,
    parse_releases,
)
from runtimekit.runtime.manifest import (
    get_manifest_reader,
    go_mod_version,
    register_manifest_reader,
)
from runtimekit.runtime.resolver import (
    ResolvedVersion,
    VersionResolver,
    VersionSource,
)
from runtimekit.runtime.cache import CacheValidator, VERSION_KEY
from runtimekit.runtime.installer import (
    ArchiveInstaller,
    Extractor,
    ShellPipelineExtractor,
    StreamingExtractor,
)
from runtimekit.runtime.pipeline import (
    BuildResult,
    DetectResult,
    RuntimeBuildpack,
)

__all__ = [
    # Registry
    "RuntimeDefinition",
    "RuntimeRegistry",
    # Catalog
    "Release",
    "ReleaseCatalogClient",
    "latest_stable",
    "parse_releases",
    # Manifest
    "get_manifest_reader",
    "go_mod_version",
    "register_manifest_reader",
    # Resolver
    "ResolvedVersion",
    "VersionResolver",
    "VersionSource",
    # Cache
    "CacheValidator",
    "VERSION_KEY",
    # Installer
    "ArchiveInstaller",
    "Extractor",
    "ShellPipelineExtractor",
    "StreamingExtractor",
    # Entry points
    "BuildResult",
    "DetectResult",
    "RuntimeBuildpack",
]
