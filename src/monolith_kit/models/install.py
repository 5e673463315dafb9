"""Ephemeral models produced while installing a module."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from monolith_kit.models.config import AppConfig
from monolith_kit.models.registry import AppKind

FileAction = Literal["created", "skipped", "error"]
InjectionAction = Literal["registered", "already_registered", "skipped"]


@dataclass(frozen=True)
class InstallTarget:
    """A directory of the project receiving a subset of a module's files.

    ``app`` is None for the implicit single-app target at the project root.
    """

    app: AppConfig | None
    kinds: tuple[AppKind, ...]

    def install_path(self, project_root: Path) -> Path:
        """Absolute directory files are written into."""
        if self.app is None:
            return project_root
        return self.app.resolve(project_root)

    @property
    def label(self) -> str:
        """Name shown to the user."""
        if self.app is None:
            return "."
        return self.app.name


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of walking a module's ``requires`` graph."""

    satisfied: list[str]
    missing: list[str]
    circular: list[str]

    @property
    def ok(self) -> bool:
        """True when nothing is missing and there is no cycle."""
        return not self.missing and not self.circular


@dataclass(frozen=True)
class FileOperationResult:
    """Outcome of materializing one file."""

    path: Path
    action: FileAction
    error: str | None = None
    sha256: str | None = None


@dataclass(frozen=True)
class InjectionResult:
    """Outcome of one registration against an entry file."""

    entry_file: Path
    alias: str
    action: InjectionAction
    import_path: str | None = None
    statement: str | None = None
    warning: str | None = None


@dataclass
class InstallResult:
    """Summary of installing one module."""

    module: str
    success: bool
    installed_files: list[str] = field(default_factory=list)
    installed_deps: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
