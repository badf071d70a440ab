"""
Core functionality for RuntimeKit.

This package contains the foundational modules that the runtime pipeline
depends on: errors, HTTP transport, layers, network policy and platform.
"""

from .exceptions import (
    RuntimeKitError,
    UserError,
    ConfigurationError,
    RuntimeRegistryError,
    RuntimeNotFoundError,
    CatalogError,
    TransportError,
    CatalogParseError,
    VersionResolutionError,
    ExecutionError,
    LayerError,
    InsecureArchiveError,
)

from .http import HttpClient, DEFAULT_RETRIES

from .layer import Layer

from .network import (
    NetworkPolicy,
    NETWORK_ENV_VAR,
    detect_network_policy,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

__all__ = [
    "RuntimeKitError",
    "UserError",
    "ConfigurationError",
    "RuntimeRegistryError",
    "RuntimeNotFoundError",
    "CatalogError",
    "TransportError",
    "CatalogParseError",
    "VersionResolutionError",
    "ExecutionError",
    "LayerError",
    "InsecureArchiveError",
    "HttpClient",
    "DEFAULT_RETRIES",
    "Layer",
    "NetworkPolicy",
    "NETWORK_ENV_VAR",
    "detect_network_policy",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
