"""Local template store resolver."""

from pathlib import Path

from monolith_kit.errors import SourceReadError
from monolith_kit.sources.base import TemplateSource

BUNDLED_TEMPLATES_DIR = Path(__file__).parent.parent / "data" / "templates"


class LocalTemplateSource(TemplateSource):
    """Read templates from local directories, first match wins.

    The default lookup is the project's own templates/ directory, then the
    templates bundled with this package.
    """

    def __init__(self, roots: list[Path]) -> None:
        self._roots = roots

    @staticmethod
    def for_project(project_root: Path) -> "LocalTemplateSource":
        return LocalTemplateSource([project_root / "templates", BUNDLED_TEMPLATES_DIR])

    def read(self, source_path: str) -> str:
        for root in self._roots:
            candidate = (root / source_path).resolve()
            if not candidate.is_relative_to(root.resolve()):
                raise SourceReadError(f"Template path escapes template store: {source_path}")
            if not candidate.is_file():
                continue
            try:
                return candidate.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise SourceReadError(f"Cannot read template {candidate}: {e}") from e

        searched = ", ".join(str(root) for root in self._roots)
        raise SourceReadError(f"Template not found: {source_path} (searched: {searched})")

    def describe(self) -> str:
        return ", ".join(str(root) for root in self._roots)
