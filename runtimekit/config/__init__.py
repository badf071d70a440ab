"""
Configuration management for RuntimeKit.

Provides loading of runtimekit.yaml merged with RUNTIMEKIT_* environment
variables into a BuildConfig.
"""

from runtimekit.config.parser import (
    BuildConfig,
    CONFIG_FILE_NAME,
    EXTRACTORS,
    LAYERS_DIR_ENV_VAR,
    RUNTIME_ENV_VAR,
    load_config,
    load_yaml_config,
)

__all__ = [
    "BuildConfig",
    "CONFIG_FILE_NAME",
    "EXTRACTORS",
    "LAYERS_DIR_ENV_VAR",
    "RUNTIME_ENV_VAR",
    "load_config",
    "load_yaml_config",
]
