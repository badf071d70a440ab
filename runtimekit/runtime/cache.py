"""Layer cache validation."""

import logging

from runtimekit.core.layer import Layer

logger = logging.getLogger(__name__)

VERSION_KEY = "version"


class CacheValidator:
    """
    Decides whether a layer already holds the resolved runtime version.

    A miss wipes the layer so the installer starts from an empty directory.
    """

    def __init__(self, key: str = VERSION_KEY):
        self.key = key

    def is_cache_valid(self, layer: Layer, version: str) -> bool:
        """
        Compare the layer's persisted version with the resolved one.

        Args:
            layer: Layer from a previous build (possibly empty)
            version: Resolved runtime version

        Returns:
            True on an exact match; False otherwise, after clearing the layer
        """
        cached = layer.get_metadata(self.key)
        if cached == version:
            logger.info(f"Cache hit for {layer.name} ({self.key}={cached})")
            return True

        if cached:
            logger.info(
                f"Cache miss for {layer.name}: have {cached}, need {version}"
            )
        else:
            logger.info(f"Cache miss for {layer.name}: nothing installed")
        layer.clear()
        return False
