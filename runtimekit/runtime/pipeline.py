"""
Detect and build entry points for the runtime provisioning stage.

``detect`` decides whether the stage applies to a project; ``build`` resolves
the runtime version, reuses the cached layer when it already holds that
version and otherwise installs the runtime archive into it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from runtimekit.config.parser import RUNTIME_ENV_VAR, BuildConfig
from runtimekit.core.filesystem import is_relative_to
from runtimekit.core.http import HttpClient
from runtimekit.core.layer import Layer
from runtimekit.core.platform import PlatformInfo, detect_platform
from runtimekit.runtime.cache import CacheValidator
from runtimekit.runtime.catalog import ReleaseCatalogClient
from runtimekit.runtime.installer import (
    ArchiveInstaller,
    Extractor,
    ShellPipelineExtractor,
    StreamingExtractor,
)
from runtimekit.runtime.manifest import get_manifest_reader
from runtimekit.runtime.registry import RuntimeDefinition, RuntimeRegistry
from runtimekit.runtime.resolver import VersionResolver, VersionSource

logger = logging.getLogger(__name__)


@dataclass
class DetectResult:
    """Outcome of detection."""

    opt_in: bool
    """Whether the stage should run for this project"""

    reason: str
    """Human readable explanation"""

    def __str__(self) -> str:
        verdict = "opt-in" if self.opt_in else "opt-out"
        return f"{verdict}: {self.reason}"


@dataclass
class BuildResult:
    """Result of a build."""

    runtime: str
    """Runtime name"""

    version: str
    """Resolved runtime version"""

    source: VersionSource
    """Where the version came from"""

    cache_hit: bool
    """Whether the layer already held this version"""

    layer_path: Path
    """Directory the runtime lives in"""

    archive_url: Optional[str] = None
    """Archive the runtime was installed from (None on a cache hit)"""


class RuntimeBuildpack:
    """
    Wires resolver, cache validator and installer together for one runtime.

    Example:
        >>> config = load_config(Path("."))
        >>> buildpack = RuntimeBuildpack(config)
        >>> if buildpack.detect().opt_in:
        ...     result = buildpack.build()
        ...     print(result.layer_path)
    """

    def __init__(
        self,
        config: BuildConfig,
        registry: Optional[RuntimeRegistry] = None,
        http: Optional[HttpClient] = None,
        extractor: Optional[Extractor] = None,
        platform: Optional[PlatformInfo] = None,
    ):
        """
        Initialize the buildpack.

        Args:
            config: Effective build configuration
            registry: Runtime definitions (default: built-ins + config overrides)
            http: HTTP transport (default: HttpClient from config)
            extractor: Archive extractor (default: chosen by config.extractor)
            platform: Target platform (default: detected)
        """
        self.config = config
        self.registry = registry or RuntimeRegistry(overrides=config.runtimes)
        self.http = http or HttpClient(
            retries=config.download_retries, timeout=config.http_timeout
        )
        self.extractor = extractor or self._create_extractor()
        self.platform = platform or detect_platform()

    def _create_extractor(self) -> Extractor:
        if self.config.extractor == "python":
            return StreamingExtractor(self.http)
        return ShellPipelineExtractor(retries=self.config.download_retries)

    @property
    def runtime(self) -> RuntimeDefinition:
        return self.registry.get(self.config.runtime)

    def detect(self) -> DetectResult:
        """Decide whether this project needs the runtime."""
        runtime = self.runtime
        selected = self.config.runtime_selection
        if selected:
            if selected == runtime.name:
                return DetectResult(True, f"{RUNTIME_ENV_VAR}={selected}")
            return DetectResult(
                False, f"{RUNTIME_ENV_VAR} is set to {selected!r}, not {runtime.name!r}"
            )

        root = self.config.project_root
        for pattern in runtime.detect_patterns:
            if any(
                path.is_file() and not is_relative_to(path, self.config.layers_dir)
                for path in root.rglob(pattern)
            ):
                return DetectResult(True, f"found {pattern} files")

        patterns = ", ".join(runtime.detect_patterns) or "source"
        return DetectResult(False, f"no {patterns} files found")

    def build(self) -> BuildResult:
        """
        Provision the runtime into its layer.

        Raises:
            VersionResolutionError: If no version could be determined
            UserError: If the archive is unavailable on both mirrors
            ExecutionError: If extraction fails
        """
        runtime = self.runtime
        policy = self.config.network

        resolver = VersionResolver(
            catalog=ReleaseCatalogClient(runtime, self.http),
            policy=policy,
            project_root=self.config.project_root,
            manifest_reader=get_manifest_reader(runtime.manifest),
            manifest_name=runtime.manifest,
            override=self.config.runtime_version_override,
        )
        resolved = resolver.resolve()

        layer = Layer(self.config.layers_dir, runtime.layer_name, build=True, cache=True)

        if CacheValidator().is_cache_valid(layer, resolved.version):
            return BuildResult(
                runtime=runtime.name,
                version=resolved.version,
                source=resolved.source,
                cache_hit=True,
                layer_path=layer.path,
            )

        installer = ArchiveInstaller(runtime, self.http, self.extractor, self.platform)
        url = installer.install(layer, resolved.version, policy)
        logger.info(f"Installed {runtime.display_name} {resolved.version} into {layer.path}")

        return BuildResult(
            runtime=runtime.name,
            version=resolved.version,
            source=resolved.source,
            cache_hit=False,
            layer_path=layer.path,
            archive_url=url,
        )
