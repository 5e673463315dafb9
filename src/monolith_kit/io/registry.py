"""Registry loading.

The registry is read from a remote URL when one is configured, falling back
to a local registry.json: first in the project root, then the copy bundled
with this package.
"""

import json
import logging
from pathlib import Path

import click
from pydantic import ValidationError

from monolith_kit.errors import ModuleNotFoundInRegistryError, RegistryError
from monolith_kit.integrations.http import FetchError, HttpFetcher
from monolith_kit.models.registry import ModuleDescriptor, Registry

logger = logging.getLogger(__name__)

REGISTRY_FILENAME = "registry.json"
BUNDLED_REGISTRY_PATH = Path(__file__).parent.parent / "data" / REGISTRY_FILENAME


def parse_registry(text: str, origin: str) -> Registry:
    """Parse registry JSON.

    Args:
        text: Raw JSON document
        origin: Path or URL, used in error messages

    Raises:
        RegistryError: If the document is not valid JSON or not a valid registry
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RegistryError(f"Invalid JSON in registry {origin}: {e}") from e
    if not isinstance(data, dict):
        raise RegistryError(f"Registry {origin} must be a JSON object")
    try:
        return Registry.model_validate(data)
    except ValidationError as e:
        raise RegistryError(f"Invalid registry {origin}:\n{e}") from e


class RegistryLoader:
    """Loads the registry once per run and caches it in memory."""

    def __init__(
        self,
        project_root: Path,
        *,
        registry_url: str | None = None,
        fetcher: HttpFetcher | None = None,
        bundled_path: Path = BUNDLED_REGISTRY_PATH,
    ) -> None:
        self._project_root = project_root
        self._registry_url = registry_url
        self._fetcher = fetcher
        self._bundled_path = bundled_path
        self._cached: Registry | None = None

    def local_paths(self) -> list[Path]:
        """Local registry locations in lookup order."""
        return [self._project_root / REGISTRY_FILENAME, self._bundled_path]

    def get_registry(self) -> Registry:
        """Return the registry, loading it on first use.

        Raises:
            RegistryError: If no registry can be loaded
        """
        if self._cached is not None:
            return self._cached

        if self._registry_url is not None and self._fetcher is not None:
            try:
                registry = self._load_remote(self._registry_url, self._fetcher)
            except (FetchError, RegistryError) as e:
                logger.debug("Remote registry failed: %s", e)
                click.echo(
                    f"Warning: Could not download registry ({e}), using local registry",
                    err=True,
                )
                registry = self._load_local()
        else:
            registry = self._load_local()

        self._cached = registry
        return registry

    def clear_cache(self) -> None:
        """Drop the cached registry; the next call reloads it."""
        self._cached = None

    def list_modules(self) -> dict[str, ModuleDescriptor]:
        return self.get_registry().modules

    def get_module(self, module_name: str) -> ModuleDescriptor | None:
        return self.get_registry().get(module_name)

    def require_module(self, module_name: str) -> ModuleDescriptor:
        """Return a module descriptor.

        Raises:
            ModuleNotFoundInRegistryError: If the module is unknown
        """
        module = self.get_module(module_name)
        if module is None:
            raise ModuleNotFoundInRegistryError(module_name)
        return module

    def search_modules(self, query: str) -> dict[str, ModuleDescriptor]:
        return self.get_registry().search(query)

    def modules_by_category(self, category: str) -> dict[str, ModuleDescriptor]:
        return self.get_registry().by_category(category)

    def _load_remote(self, url: str, fetcher: HttpFetcher) -> Registry:
        logger.debug("Downloading registry from %s", url)
        return parse_registry(fetcher.get_text(url), url)

    def _load_local(self) -> Registry:
        for registry_path in self.local_paths():
            if not registry_path.exists():
                continue
            logger.debug("Using local registry %s", registry_path)
            text = registry_path.read_text(encoding="utf-8")
            return parse_registry(text, str(registry_path))

        searched = ", ".join(str(p) for p in self.local_paths())
        raise RegistryError(f"No registry.json found (searched: {searched})")
