"""Fake HttpFetcher implementation for testing."""

from monolith_kit.integrations.http import FetchError, HttpFetcher


class FakeHttpFetcher(HttpFetcher):
    """Serves responses from a URL -> body mapping; unknown URLs fail."""

    def __init__(self, *, responses: dict[str, str] | None = None) -> None:
        self._responses = responses or {}
        self._requested: list[str] = []

    @property
    def requested_urls(self) -> list[str]:
        return self._requested

    def get_text(self, url: str) -> str:
        self._requested.append(url)
        if url not in self._responses:
            raise FetchError(f"HTTP 404 from {url}")
        return self._responses[url]
