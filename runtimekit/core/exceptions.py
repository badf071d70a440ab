"""
Centralized exception hierarchy for RuntimeKit.

All errors raised by the resolution and installation pipeline derive from
RuntimeKitError so the CLI can tell user-facing failures (UserError) apart
from internal ones.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class RuntimeKitError(Exception):
    """Base exception for all RuntimeKit errors."""

    pass


class UserError(RuntimeKitError):
    """
    Failure the user can fix, e.g. a runtime version that exists on no mirror.

    The message is the last diagnostic the operator sees, so it must state
    what failed and how to override it.
    """

    pass


class ConfigurationError(RuntimeKitError):
    """Raised when build configuration is missing or invalid."""

    pass


# ============================================================================
# Runtime Definition Exceptions
# ============================================================================


class RuntimeRegistryError(RuntimeKitError):
    """Base exception for runtime definition registry errors."""

    pass


class RuntimeNotFoundError(RuntimeRegistryError):
    """Raised when no definition exists for the requested runtime."""

    def __init__(self, runtime_name: str):
        self.runtime_name = runtime_name
        super().__init__(f"Unknown runtime: {runtime_name}")


# ============================================================================
# Release Catalog Exceptions
# ============================================================================


class CatalogError(RuntimeKitError):
    """Base exception for release catalog lookups."""

    pass


class TransportError(CatalogError):
    """Catalog download failed (connection error or non-success status)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"fetching {url!r}: {reason}")


class CatalogParseError(CatalogError):
    """Catalog body is malformed or lists no usable stable release."""

    def __init__(self, url: str, detail: str = ""):
        self.url = url
        self.detail = detail
        if detail:
            msg = f"parsing JSON response from URL {url!r}: {detail}"
        else:
            msg = f"parsing latest stable version from {url!r}"
        super().__init__(msg)


class VersionResolutionError(RuntimeKitError):
    """Raised when no version source could produce a runtime version."""

    pass


# ============================================================================
# Installation Exceptions
# ============================================================================


class ExecutionError(RuntimeKitError):
    """Archive download/extraction failed while writing into the layer."""

    pass


class LayerError(RuntimeKitError):
    """Layer directory or its metadata could not be read or written."""

    pass


class InsecureArchiveError(ExecutionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass
