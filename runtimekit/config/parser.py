"""YAML configuration parser for RuntimeKit.

Build settings come from three places, later ones winning:

1. built-in defaults,
2. the optional ``runtimekit.yaml`` in the project root,
3. environment variables (``RUNTIMEKIT_*``).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from runtimekit.core import env
from runtimekit.core.exceptions import ConfigurationError
from runtimekit.core.http import DEFAULT_RETRIES, DEFAULT_TIMEOUT
from runtimekit.core.network import NetworkPolicy, detect_network_policy

CONFIG_FILE_NAME = "runtimekit.yaml"

RUNTIME_ENV_VAR = env.RUNTIME
LAYERS_DIR_ENV_VAR = env.LAYERS_DIR

EXTRACTORS = ("shell", "python")

_KNOWN_KEYS = {
    "runtime",
    "runtime_version",
    "network",
    "layers_dir",
    "extractor",
    "download_retries",
    "http_timeout",
    "runtimes",
}


@dataclass
class BuildConfig:
    """Settings for one detect/build invocation."""

    project_root: Path
    runtime: str = "go"
    runtime_version_override: Optional[str] = None
    runtime_selection: Optional[str] = None  # RUNTIMEKIT_RUNTIME, used by detect
    network: NetworkPolicy = NetworkPolicy.DEFAULT
    layers_dir: Optional[Path] = None
    extractor: str = "shell"  # 'shell' (curl | tar) or 'python' (requests + tarfile)
    download_retries: int = DEFAULT_RETRIES
    http_timeout: int = DEFAULT_TIMEOUT
    runtimes: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        self.project_root = Path(self.project_root)
        if self.layers_dir is None:
            self.layers_dir = self.project_root / ".runtimekit" / "layers"
        self.layers_dir = Path(self.layers_dir)


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required but missing, or is not valid YAML
    """
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_file}: top level must be a mapping")
    return data


def _non_negative_int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def load_config(
    project_root: Path,
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    layers_dir: Optional[Path] = None,
) -> BuildConfig:
    """
    Build the effective configuration for a project.

    Args:
        project_root: Project root directory
        config_file: Explicit config path (default: <project_root>/runtimekit.yaml)
        environ: Environment mapping (default: os.environ)
        layers_dir: Explicit layers directory, overriding config and environment

    Returns:
        Effective BuildConfig

    Raises:
        ConfigurationError: If any setting is invalid
    """
    project_root = Path(project_root)
    environ = os.environ if environ is None else environ

    if config_file is None:
        data = load_yaml_config(project_root / CONFIG_FILE_NAME)
    else:
        data = load_yaml_config(Path(config_file), required=True)

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    runtimes = data.get("runtimes") or {}
    if not isinstance(runtimes, dict):
        raise ConfigurationError("'runtimes' must be a mapping of runtime name to fields")

    extractor = data.get("extractor", "shell")
    if extractor not in EXTRACTORS:
        raise ConfigurationError(
            f"Unknown extractor {extractor!r}. Expected one of: {', '.join(EXTRACTORS)}"
        )

    configured_version = data.get("runtime_version")
    if configured_version is not None and not isinstance(configured_version, str):
        raise ConfigurationError(
            f"'runtime_version' must be a quoted string, got {configured_version!r}"
        )
    version = environ.get(env.RUNTIME_VERSION) or configured_version
    configured_network = data.get("network")
    if configured_network is not None and not isinstance(configured_network, str):
        raise ConfigurationError(
            f"'network' must be a string, got {configured_network!r}"
        )
    network = environ.get(env.NETWORK) or configured_network

    if layers_dir is None:
        layers_dir = environ.get(LAYERS_DIR_ENV_VAR) or data.get("layers_dir")
    if layers_dir is not None:
        layers_dir = Path(layers_dir)
        if not layers_dir.is_absolute():
            layers_dir = project_root / layers_dir

    return BuildConfig(
        project_root=project_root,
        runtime=str(data.get("runtime", "go")),
        runtime_version_override=str(version) if version else None,
        runtime_selection=environ.get(RUNTIME_ENV_VAR) or None,
        network=detect_network_policy(network),
        layers_dir=layers_dir,
        extractor=extractor,
        download_retries=_non_negative_int(data, "download_retries", DEFAULT_RETRIES),
        http_timeout=_non_negative_int(data, "http_timeout", DEFAULT_TIMEOUT),
        runtimes=runtimes,
    )
