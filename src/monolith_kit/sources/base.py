"""Template source interface."""

from abc import ABC, abstractmethod


class TemplateSource(ABC):
    """Where module template files are read from."""

    @abstractmethod
    def read(self, source_path: str) -> str:
        """Return the content of a template.

        Args:
            source_path: Path relative to the template store (FileSpec.source_path)

        Raises:
            SourceReadError: If the template cannot be read or fetched
        """
        ...

    @abstractmethod
    def describe(self) -> str:
        """Short description for messages."""
        ...
