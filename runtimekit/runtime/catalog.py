"""
Release catalog lookup.

The catalog is a JSON array of ``{"version": "go1.22.0", "stable": true}``
records. The endpoint lists releases newest first and this module relies on
that order: the first stable record is taken as the latest, no sorting is
applied.
"""

import json
import logging
from dataclasses import dataclass
from typing import List

from runtimekit.core.exceptions import CatalogParseError
from runtimekit.core.http import HttpClient
from runtimekit.core.network import NetworkPolicy
from runtimekit.runtime.registry import RuntimeDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Release:
    """One catalog entry."""

    version: str
    stable: bool


def parse_releases(body: str, url: str) -> List[Release]:
    """
    Parse a catalog document, keeping server order.

    Args:
        body: Raw response body
        url: Source URL, used in error messages

    Raises:
        CatalogParseError: If the body is not a JSON array of release objects
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise CatalogParseError(url, str(e)) from e

    if not isinstance(data, list):
        raise CatalogParseError(url, f"expected a JSON array, got {type(data).__name__}")

    releases = []
    for entry in data:
        if not isinstance(entry, dict):
            raise CatalogParseError(url, f"expected release object, got {entry!r}")
        version = entry.get("version", "")
        releases.append(
            Release(
                version=version if isinstance(version, str) else "",
                stable=entry.get("stable") is True,
            )
        )
    return releases


def latest_stable(releases: List[Release], prefix: str, url: str) -> str:
    """
    Return the first stable release version with its prefix removed.

    Stable entries whose version is empty after prefix removal are skipped.

    Raises:
        CatalogParseError: If no stable release has a usable version
    """
    for release in releases:
        if not release.stable:
            continue
        version = release.version.removeprefix(prefix) if prefix else release.version
        if version:
            return version
    raise CatalogParseError(url)


class ReleaseCatalogClient:
    """
    Looks up the newest stable release of a runtime.

    Example:
        >>> client = ReleaseCatalogClient(registry.get("go"), HttpClient())
        >>> client.fetch_latest_stable(NetworkPolicy.DEFAULT)
        '1.22.0'
    """

    def __init__(self, runtime: RuntimeDefinition, http: HttpClient):
        self.runtime = runtime
        self.http = http

    def fetch_latest_stable(self, policy: NetworkPolicy) -> str:
        """
        Download the catalog for the policy's network and pick the latest stable.

        Raises:
            TransportError: If the catalog cannot be downloaded
            CatalogParseError: If the catalog is malformed or has no stable release
        """
        url = self.runtime.catalog_url_for(policy)
        logger.debug(f"Fetching {self.runtime.display_name} release catalog from {url}")
        body = self.http.get_text(url)
        releases = parse_releases(body, url)
        return latest_stable(releases, self.runtime.version_prefix, url)
