"""
Project manifest version readers.

A reader takes the project root and returns the runtime version the project
declares, or an empty string when there is none.
"""

import logging
import re
from pathlib import Path
from typing import Callable, Dict

from runtimekit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ManifestReader = Callable[[Path], str]

# `go 1.21`, `go 1.21.0`, `go 1.22rc1`, optionally followed by a comment.
_GO_DIRECTIVE = re.compile(r"^\s*go\s+([0-9][0-9A-Za-z.\-]*)\s*(?://.*)?$")


def go_mod_version(project_root: Path) -> str:
    """
    Read the ``go`` directive from go.mod.

    Example:
        >>> go_mod_version(Path("/workspace"))  # go.mod contains "go 1.21"
        '1.21'
    """
    go_mod = Path(project_root) / "go.mod"
    if not go_mod.is_file():
        return ""

    try:
        content = go_mod.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {go_mod}: {e}")
        return ""

    for line in content.splitlines():
        match = _GO_DIRECTIVE.match(line)
        if match:
            return match.group(1)
    return ""


def _no_manifest(project_root: Path) -> str:
    return ""


_READERS: Dict[str, ManifestReader] = {
    "go.mod": go_mod_version,
}


def register_manifest_reader(name: str, reader: ManifestReader):
    """Register a reader under a manifest name."""
    _READERS[name] = reader


def get_manifest_reader(name) -> ManifestReader:
    """
    Look up a reader by manifest name; None yields a reader that finds nothing.

    Raises:
        ConfigurationError: If no reader is registered for the name
    """
    if name is None:
        return _no_manifest
    try:
        return _READERS[name]
    except KeyError:
        raise ConfigurationError(
            f"No manifest reader for {name!r}. Available: {', '.join(sorted(_READERS))}"
        ) from None
