"""Configuration models for monolith.config.json."""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal, cast

from monolith_kit.models.registry import APP_KINDS, AppKind, RegistrationKind

ProjectType = Literal["single-app", "workspace"]
InstallStatus = Literal["complete", "partial"]

CONFIG_FILENAME = "monolith.config.json"


def validate_project_type(value: str) -> ProjectType:
    """Validate and return project type.

    ``monorepo`` is accepted as an alias of ``workspace``.

    Raises:
        ValueError: If value is not a valid project type
    """
    if value == "monorepo":
        return "workspace"
    if value not in ("single-app", "workspace"):
        raise ValueError(f"Invalid project type: {value}")
    return cast(ProjectType, value)


def validate_app_kind(value: str) -> AppKind:
    """Validate and return app kind.

    Raises:
        ValueError: If value is not backend or frontend
    """
    if value not in APP_KINDS:
        raise ValueError(f"Invalid app type: {value} (expected backend or frontend)")
    return cast(AppKind, value)


@dataclass(frozen=True)
class AppConfig:
    """One application of a workspace."""

    name: str
    kind: AppKind
    path: str

    def resolve(self, project_root: Path) -> Path:
        """Absolute directory of this app."""
        return (project_root / self.path).resolve()


@dataclass(frozen=True)
class RecordedRegistration:
    """An injection performed into an entry file, kept for removal."""

    entry_file: str  # Project-relative path of the entry file
    alias: str
    import_path: str
    kind: RegistrationKind
    statement: str | None = None  # Routes statement that was inserted


@dataclass(frozen=True)
class InstalledModule:
    """Represents an installed module in monolith.config.json."""

    name: str
    version: str
    installed_at: str
    status: InstallStatus = "complete"
    targets: tuple[str, ...] = ()
    files: dict[str, str] = field(default_factory=dict)  # project-relative path -> sha256
    registrations: tuple[RecordedRegistration, ...] = ()


@dataclass(frozen=True)
class ProjectConfig:
    """Project configuration from monolith.config.json."""

    project_type: ProjectType
    package_manager: str | None
    apps: tuple[AppConfig, ...]
    installed_modules: tuple[InstalledModule, ...]
    created_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)  # Unknown top-level keys, preserved on save

    def get_installed(self, module_name: str) -> InstalledModule | None:
        """Return the installed record of a module, or None."""
        for installed in self.installed_modules:
            if installed.name == module_name:
                return installed
        return None

    def apps_of_kind(self, kind: AppKind) -> list[AppConfig]:
        """Apps of ``kind`` in declaration order."""
        return [app for app in self.apps if app.kind == kind]

    def upsert_module(self, module: InstalledModule) -> "ProjectConfig":
        """Return new config with the module record added or replaced."""
        if self.get_installed(module.name) is None:
            return replace(self, installed_modules=(*self.installed_modules, module))
        modules = tuple(module if m.name == module.name else m for m in self.installed_modules)
        return replace(self, installed_modules=modules)

    def remove_module(self, module_name: str) -> "ProjectConfig":
        """Return new config without the module record."""
        modules = tuple(m for m in self.installed_modules if m.name != module_name)
        return replace(self, installed_modules=modules)
