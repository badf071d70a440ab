"""
HTTP transport used for catalog lookups, mirror probes and archive streams.

Retries are a property of the transport: the session mounts an urllib3
``Retry`` policy so callers issue a single request and never loop themselves.
"""

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from runtimekit.core.exceptions import TransportError

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3
DEFAULT_TIMEOUT = 30


class HttpClient:
    """
    Blocking HTTP client with transport-level retries.

    Example:
        >>> client = HttpClient(retries=3)
        >>> client.status("https://dl.google.com/go/go1.22.0.linux-amd64.tar.gz")
        200
    """

    def __init__(
        self,
        retries: int = DEFAULT_RETRIES,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            retries: Retry count for connection errors and 5xx responses
            timeout: Per-request timeout in seconds
            session: Optional preconfigured session (adapters are still mounted)
        """
        self.retries = retries
        self.timeout = timeout
        self.session = session or requests.Session()

        retry = Retry(
            total=retries,
            connect=retries,
            read=retries,
            backoff_factor=1,
            status_forcelist=(500, 502, 503, 504),
            allowed_methods=frozenset({"GET", "HEAD"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def status(self, url: str) -> int:
        """
        Probe a URL with HEAD and return its final status code.

        Transport failures are reported as status 0 so callers can treat them
        like any other unavailable mirror.
        """
        try:
            response = self.session.head(url, allow_redirects=True, timeout=self.timeout)
        except RequestException as e:
            logger.debug(f"HEAD {url} failed: {e}")
            return 0
        logger.debug(f"HEAD {url} -> {response.status_code}")
        return response.status_code

    def get_text(self, url: str) -> str:
        """
        Download a document and return its body.

        Raises:
            TransportError: On connection failure or non-success status
        """
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, allow_redirects=True, timeout=self.timeout)
            response.raise_for_status()
        except RequestException as e:
            raise TransportError(url, str(e)) from e
        return response.text

    def open_stream(self, url: str) -> requests.Response:
        """
        Start a streaming download; the caller must close the response.

        Raises:
            TransportError: On connection failure or non-success status
        """
        logger.debug(f"GET (stream) {url}")
        try:
            response = self.session.get(
                url, stream=True, allow_redirects=True, timeout=self.timeout
            )
            response.raise_for_status()
        except RequestException as e:
            raise TransportError(url, str(e)) from e
        return response

    def close(self):
        """Release pooled connections."""
        self.session.close()
