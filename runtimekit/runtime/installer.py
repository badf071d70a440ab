"""
Runtime archive installation.

On a cache miss the installer picks a mirror that actually serves the
requested version, streams the archive into the layer (dropping the
archive's single top-level directory) and only then records the installed
version in the layer metadata.
"""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from typing import List

from requests.exceptions import RequestException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from runtimekit.core.env import RUNTIME_VERSION as RUNTIME_VERSION_ENV_VAR
from runtimekit.core.exceptions import ExecutionError, TransportError, UserError
from runtimekit.core.http import DEFAULT_RETRIES, HttpClient
from runtimekit.core.layer import Layer
from runtimekit.core.network import NetworkPolicy
from runtimekit.core.platform import PlatformInfo
from runtimekit.runtime.cache import VERSION_KEY
from runtimekit.runtime.registry import RuntimeDefinition

logger = logging.getLogger(__name__)

HTTP_OK = 200


# ============================================================================
# Extractors
# ============================================================================


class Extractor(ABC):
    """Writes the contents of a remote archive into a layer."""

    @abstractmethod
    def extract(self, url: str, layer: Layer, strip_components: int = 1):
        """
        Download url and extract it into the layer directory.

        Raises:
            ExecutionError: If download or extraction fails
        """
        pass


class ShellPipelineExtractor(Extractor):
    """
    Streams the archive through ``curl | tar`` in a single bash pipeline.

    Retries are handled by curl (``--retry``).
    """

    def __init__(self, retries: int = DEFAULT_RETRIES, shell: str = "bash"):
        self.retries = retries
        self.shell = shell

    def build_command(self, url: str, layer: Layer, strip_components: int = 1) -> List[str]:
        """Build the argv for the download-and-extract pipeline."""
        pipeline = (
            "set -o pipefail; "
            f"curl --fail --show-error --silent --location --retry {self.retries} "
            f"{shlex.quote(url)} | "
            f"tar xz --directory {shlex.quote(str(layer.path))} "
            f"--strip-components={strip_components}"
        )
        return [self.shell, "-c", pipeline]

    def extract(self, url: str, layer: Layer, strip_components: int = 1):
        cmd = self.build_command(url, layer, strip_components)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ExecutionError(
                f"Failed to execute {self.shell}: {e}\n" f"Command: {cmd[-1]}"
            ) from e

        if result.returncode != 0:
            raise ExecutionError(
                f"Installing from {url} failed with exit code {result.returncode}\n"
                f"Command: {cmd[-1]}\n"
                f"Error: {result.stderr.strip()}"
            )


class StreamingExtractor(Extractor):
    """Streams the archive over HTTP and extracts it with tarfile."""

    def __init__(self, http: HttpClient):
        self.http = http

    def extract(self, url: str, layer: Layer, strip_components: int = 1):
        try:
            response = self.http.open_stream(url)
        except TransportError as e:
            raise ExecutionError(f"Downloading {url} failed: {e}") from e

        try:
            count = layer.write_extracted(response.raw, strip_components=strip_components)
        except (RequestException, Urllib3HTTPError) as e:
            raise ExecutionError(f"Downloading {url} failed: {e}") from e
        finally:
            response.close()
        logger.debug(f"Extracted {count} entries into {layer.path}")


# ============================================================================
# Installer
# ============================================================================


class ArchiveInstaller:
    """
    Installs a runtime archive into a layer with mirror fallback.

    Example:
        >>> installer = ArchiveInstaller(go, http, ShellPipelineExtractor(), platform)
        >>> installer.install(layer, "1.22.0", NetworkPolicy.DEFAULT)
        'https://dl.google.com/go/go1.22.0.linux-amd64.tar.gz'
    """

    def __init__(
        self,
        runtime: RuntimeDefinition,
        http: HttpClient,
        extractor: Extractor,
        platform: PlatformInfo,
    ):
        self.runtime = runtime
        self.http = http
        self.extractor = extractor
        self.platform = platform

    def _missing_message(self, version: str, url: str, code: int) -> str:
        return (
            f"Runtime version {version} does not exist at {url} (status {code}). "
            f"You can specify the version with {RUNTIME_VERSION_ENV_VAR}."
        )

    def select_archive_url(self, version: str, policy: NetworkPolicy) -> str:
        """
        Return the first mirror URL that answers 200 OK.

        Raises:
            UserError: If neither mirror serves the archive
        """
        primary, alternate = self.runtime.archive_urls(version, policy, self.platform)

        code = self.http.status(primary)
        if code == HTTP_OK:
            return primary

        logger.warning(self._missing_message(version, primary, code))
        code = self.http.status(alternate)
        if code != HTTP_OK:
            raise UserError(self._missing_message(version, alternate, code))

        logger.info(f"Using alternate mirror {alternate}")
        return alternate

    def install(self, layer: Layer, version: str, policy: NetworkPolicy) -> str:
        """
        Install a runtime version into a cleared layer.

        Returns:
            The archive URL the runtime was installed from

        Raises:
            UserError: If the archive is unavailable on both mirrors
            ExecutionError: If download or extraction fails
        """
        url = self.select_archive_url(version, policy)

        logger.info(f"Installing {self.runtime.display_name} v{version}")
        self.extractor.extract(url, layer, strip_components=1)

        layer.set_metadata(VERSION_KEY, version)
        return url
