"""HTTP fetching for remote registries and templates."""

import logging
from abc import ABC, abstractmethod

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class FetchError(Exception):
    """Remote resource could not be fetched."""


class HttpFetcher(ABC):
    """Abstract HTTP GET for dependency injection."""

    @abstractmethod
    def get_text(self, url: str) -> str:
        """Fetch ``url`` and return the response body.

        Raises:
            FetchError: On network errors or non-200 responses
        """
        ...


class HttpxFetcher(HttpFetcher):
    """Production implementation using httpx."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def get_text(self, url: str) -> str:
        logger.debug("GET %s", url)
        try:
            with httpx.Client(
                transport=self._transport, timeout=self._timeout, follow_redirects=True
            ) as client:
                response = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"Request to {url} failed: {e}") from e
        if response.status_code != 200:
            raise FetchError(f"HTTP {response.status_code} from {url}")
        return response.text
