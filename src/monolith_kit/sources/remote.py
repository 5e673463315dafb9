"""Remote template store resolver."""

from monolith_kit.errors import SourceReadError
from monolith_kit.integrations.http import FetchError, HttpFetcher
from monolith_kit.sources.base import TemplateSource


class RemoteTemplateSource(TemplateSource):
    """Fetch templates from ``<base_url>/<source_path>``."""

    def __init__(self, base_url: str, fetcher: HttpFetcher) -> None:
        self._base_url = base_url.rstrip("/")
        self._fetcher = fetcher

    def url_for(self, source_path: str) -> str:
        return f"{self._base_url}/{source_path.lstrip('/')}"

    def read(self, source_path: str) -> str:
        url = self.url_for(source_path)
        try:
            return self._fetcher.get_text(url)
        except FetchError as e:
            raise SourceReadError(f"Cannot fetch template {source_path}: {e}") from e

    def describe(self) -> str:
        return self._base_url
