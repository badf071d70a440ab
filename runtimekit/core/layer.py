"""
Layer directories and their persisted metadata.

A layer is a directory under the layers root plus a sibling
``<name>.json`` file holding a flat string key/value metadata map. The
metadata survives across builds and is the only state one build hands to
the next.

Example:
    >>> from pathlib import Path
    >>> from runtimekit.core.layer import Layer
    >>>
    >>> layer = Layer(Path("/layers"), "go", build=True, cache=True)
    >>> layer.get_metadata("version")
    ''
    >>> layer.set_metadata("version", "1.22.0")
"""

import json
import logging
from pathlib import Path
from typing import BinaryIO, Dict, Optional

from runtimekit.core.exceptions import LayerError
from runtimekit.core.filesystem import atomic_write, clear_directory, extract_tar_stream

logger = logging.getLogger(__name__)


class Layer:
    """
    A cacheable directory with a persistent metadata store.

    The directory is only ever mutated as a whole: ``clear()`` wipes it
    (metadata included) and ``write_extracted()`` populates it from an
    archive stream.

    Attributes:
        name: Layer name (directory name under the layers root)
        path: Layer directory
        metadata_file: Path to the persisted metadata JSON
        build: Layer is available to later build steps
        cache: Layer is kept between builds
        launch: Layer is shipped in the final image
    """

    def __init__(
        self,
        layers_dir: Path,
        name: str,
        build: bool = True,
        cache: bool = True,
        launch: bool = False,
    ):
        if not name or "/" in name or name in (".", ".."):
            raise LayerError(f"Invalid layer name: {name!r}")

        self.name = name
        self.layers_dir = Path(layers_dir)
        self.path = self.layers_dir / name
        self.metadata_file = self.layers_dir / f"{name}.json"
        self.build = build
        self.cache = cache
        self.launch = launch
        self._metadata: Optional[Dict[str, str]] = None

        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LayerError(f"Could not create layer directory {self.path}: {e}") from e

    def __repr__(self) -> str:
        return f"Layer({self.name!r}, path={str(self.path)!r})"

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def _load(self) -> Dict[str, str]:
        """Load metadata from disk; a corrupt file reads as empty."""
        if self._metadata is not None:
            return self._metadata

        if not self.metadata_file.exists():
            logger.debug(f"No metadata for layer {self.name}")
            self._metadata = {}
            return self._metadata

        try:
            with open(self.metadata_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            metadata = data.get("metadata", {})
            if not isinstance(metadata, dict):
                raise TypeError("'metadata' is not an object")
            self._metadata = {str(k): str(v) for k, v in metadata.items()}
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning(
                f"Invalid metadata file {self.metadata_file}, ignoring it: {e}"
            )
            self._metadata = {}
        except OSError as e:
            raise LayerError(f"Could not read {self.metadata_file}: {e}") from e

        return self._metadata

    def _save(self):
        data = {
            "types": {"build": self.build, "cache": self.cache, "launch": self.launch},
            "metadata": self._load(),
        }
        try:
            atomic_write(self.metadata_file, json.dumps(data, indent=2, sort_keys=True))
        except OSError as e:
            raise LayerError(f"Could not write {self.metadata_file}: {e}") from e

    def get_metadata(self, key: str) -> str:
        """Return the stored value for key, or an empty string."""
        return self._load().get(key, "")

    def set_metadata(self, key: str, value: str):
        """Persist a metadata value."""
        self._load()[key] = value
        self._save()
        logger.debug(f"Layer {self.name}: set {key}={value}")

    # ------------------------------------------------------------------
    # Contents
    # ------------------------------------------------------------------

    def clear(self):
        """
        Remove every file in the layer and forget its metadata.

        After this call the layer claims no version, so an interrupted
        install can never look like a valid cache entry.
        """
        logger.debug(f"Clearing layer {self.name} at {self.path}")
        try:
            clear_directory(self.path)
            self.metadata_file.unlink(missing_ok=True)
        except OSError as e:
            raise LayerError(f"Could not clear layer {self.path}: {e}") from e
        self._metadata = {}

    def write_extracted(self, stream: BinaryIO, strip_components: int = 0) -> int:
        """
        Extract a gzip-compressed tar stream into the layer.

        Args:
            stream: Readable binary stream
            strip_components: Leading path components to drop from members

        Returns:
            Number of archive members written
        """
        return extract_tar_stream(stream, self.path, strip=strip_components)

    def is_empty(self) -> bool:
        """Check whether the layer directory has no entries."""
        return not any(self.path.iterdir())
