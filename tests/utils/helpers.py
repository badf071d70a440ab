"""
Helper functions for RuntimeKit tests.
"""

import json
from pathlib import Path

GO_CATALOG_URL = "https://golang.org/dl/?mode=json"
GO_ALT_CATALOG_URL = "https://golang.google.cn/dl/?mode=json"


def go_archive_url(version: str, alt: bool = False) -> str:
    """Archive URL for linux-amd64 on the default or alternative mirror."""
    if alt:
        return f"https://golang.google.cn/dl/go{version}.linux-amd64.tar.gz"
    return f"https://dl.google.com/go/go{version}.linux-amd64.tar.gz"


def write_layer_metadata(layers_dir: Path, name: str, **metadata) -> Path:
    """
    Persist layer metadata the way a previous build would have.

    Returns:
        Path to the metadata file
    """
    path = Path(layers_dir) / f"{name}.json"
    path.write_text(json.dumps({"metadata": metadata}))
    return path
