"""
Test utilities for RuntimeKit testing.
"""

from .helpers import (
    GO_ALT_CATALOG_URL,
    GO_CATALOG_URL,
    go_archive_url,
    write_layer_metadata,
)

__all__ = [
    "GO_ALT_CATALOG_URL",
    "GO_CATALOG_URL",
    "go_archive_url",
    "write_layer_metadata",
]
